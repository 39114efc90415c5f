from __future__ import annotations

import random
from datetime import datetime, time, timedelta, timezone

import pytest

from src.company_management.company_management.core.enums import Department, Role
from src.company_management.company_management.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
)
from src.company_management.company_management.performance.model import PerformanceDelta
from src.company_management.company_management.performance.policy import ScoringPolicy

MARCH = datetime(2025, 3, 15, 12, 0)


def test_total_score_never_drifts(world, cast):
    performance = world.container.performance_service
    emp = cast.tech_emp.user_id
    rng = random.Random(7)

    for _ in range(60):
        event = rng.choice(["task", "late", "leave"])
        if event == "task":
            performance.on_task_completed(emp, now=MARCH)
        elif event == "late":
            performance.on_late_login(emp, datetime(2025, 3, 15, 10, 0))
        else:
            performance.on_leave_approved(emp, now=MARCH)
        bucket = world.performance.get(emp, 3, 2025)
        assert bucket.total_score == bucket.task_points + bucket.late_login_penalty
        assert bucket.task_points == 10 * bucket.tasks_completed
        assert bucket.late_login_penalty == -5 * bucket.late_logins


def test_late_login_alone_gives_negative_score(world, cast):
    bucket = world.container.performance_service.on_late_login(cast.sales_emp.user_id, datetime(2025, 3, 3, 9, 45))
    assert (bucket.late_logins, bucket.late_login_penalty, bucket.total_score) == (1, -5, -5)
    assert bucket.department == Department.SALES


def test_events_land_in_the_month_they_happen(world, cast):
    performance = world.container.performance_service
    emp = cast.tech_emp.user_id

    performance.on_task_completed(emp, now=datetime(2025, 1, 31, 23, 59))
    performance.on_task_completed(emp, now=datetime(2025, 2, 1, 0, 0))

    assert world.performance.get(emp, 1, 2025).tasks_completed == 1
    assert world.performance.get(emp, 2, 2025).tasks_completed == 1


def test_aware_timestamps_are_judged_in_company_time():
    policy = ScoringPolicy(timezone_name="UTC")
    ist = timezone(timedelta(hours=5, minutes=30))
    # 15:00 in +05:30 is 09:30 UTC, 16:00 is 10:30 UTC
    assert not policy.is_late(datetime(2025, 3, 10, 15, 0, tzinfo=ist))
    assert policy.is_late(datetime(2025, 3, 10, 16, 0, tzinfo=ist))
    assert policy.period_of(datetime(2025, 4, 1, 2, 0, tzinfo=ist)) == (3, 2025)
    assert policy.is_late(datetime(2025, 3, 10, 9, 31))


def test_policy_rejects_bad_settings():
    with pytest.raises(ValueError):
        ScoringPolicy(late_login_points=5)
    with pytest.raises(ValueError):
        ScoringPolicy(timezone_name="Mars/Olympus")


def test_policy_from_settings_parses_threshold():
    class Settings:
        LATE_LOGIN_THRESHOLD = "10:15"
        TASK_COMPLETED_POINTS = 20
        LATE_LOGIN_POINTS = -3
        COMPANY_TIMEZONE = "UTC"

    policy = ScoringPolicy.from_settings(Settings)
    assert policy.late_after == time(10, 15)
    assert policy.task_completed_points == 20
    assert policy.late_login_points == -3


def test_bucket_created_concurrently_is_reused(world, cast, monkeypatch):
    emp = cast.tech_emp.user_id
    real_create = world.performance.create

    def racing_create(**kwargs):
        # another request inserts the same bucket first
        real_create(**kwargs)
        raise ConflictError("Performance bucket already exists")

    monkeypatch.setattr(world.performance, "create", racing_create)

    bucket = world.container.performance_service.on_task_completed(emp, now=MARCH)

    assert len(world.performance.rows) == 1
    assert bucket.tasks_completed == 1


def test_users_without_department_get_no_bucket(world, cast):
    performance = world.container.performance_service
    assert performance.on_task_completed(cast.cofounder.user_id, now=MARCH) is None
    assert performance.on_task_completed(4242, now=MARCH) is None
    assert world.performance.rows == {}


def test_report_and_leaderboard_are_scoped_and_sorted(world, cast):
    performance = world.container.performance_service
    second_dev = world.user("Dan Dev", Role.EMPLOYEE, Department.TECHNICAL)
    performance.on_task_completed(cast.tech_emp.user_id, now=MARCH)
    for _ in range(2):
        performance.on_task_completed(second_dev.user_id, now=MARCH)
    performance.on_task_completed(cast.sales_emp.user_id, now=MARCH)

    board = performance.leaderboard(cast.tech_head.as_actor(), month=3, year=2025)
    assert [b.employee_id for b in board] == [second_dev.user_id, cast.tech_emp.user_id]

    everyone = performance.report(cast.founder.as_actor(), month=3, year=2025)
    assert len(everyone) == 3
    assert everyone[0].employee_id == second_dev.user_id

    assert len(performance.leaderboard(cast.founder.as_actor(), month=3, year=2025, limit=1)) == 1
    with pytest.raises(AuthorizationError):
        performance.leaderboard(cast.tech_emp.as_actor(), month=3, year=2025)


def test_department_summary(world, cast):
    performance = world.container.performance_service
    performance.on_task_completed(cast.tech_emp.user_id, now=MARCH)
    performance.on_late_login(cast.tech_emp.user_id, datetime(2025, 3, 4, 11, 0))

    summary = performance.department_summary(cast.tech_head.as_actor(), "technical", month=3, year=2025)
    assert summary.employee_count == 1
    assert summary.average_score == 5.0
    assert summary.total_late_logins == 1
    assert summary.top_performer.employee_id == cast.tech_emp.user_id

    with pytest.raises(AuthorizationError):
        performance.department_summary(cast.tech_head.as_actor(), "sales", month=3, year=2025)
    with pytest.raises(AuthorizationError):
        performance.department_summary(cast.tech_emp.as_actor(), "technical", month=3, year=2025)


def test_employee_reads(world, cast):
    performance = world.container.performance_service
    performance.on_task_completed(cast.tech_emp.user_id, now=MARCH)

    mine = performance.mine(cast.tech_emp.as_actor(), month=3, year=2025)
    assert mine.total_score == 10
    placeholder = performance.mine(cast.tech_emp.as_actor(), month=4, year=2025)
    assert placeholder.total_score == 0
    assert placeholder.to_public()["id"] is None

    assert performance.for_employee(cast.tech_head.as_actor(), cast.tech_emp.user_id, month=3, year=2025).total_score == 10
    with pytest.raises(AuthorizationError):
        performance.for_employee(cast.sales_head.as_actor(), cast.tech_emp.user_id, month=3, year=2025)
    with pytest.raises(NotFoundError):
        performance.for_employee(cast.founder.as_actor(), cast.sales_emp.user_id, month=3, year=2025)


def test_recalculate_rebuilds_from_history(world, cast, upload):
    emp = cast.tech_emp
    tasks = world.container.task_service
    task = tasks.create(cast.tech_head.as_actor(), title="One", assigned_to=emp.user_id)
    tasks.complete_with_submission(emp.as_actor(), task.task_id, upload("one.pdf"), now=MARCH)
    world.container.attendance_service.record_login(emp, now=datetime(2025, 3, 3, 9, 50))
    world.container.attendance_service.record_login(emp, now=datetime(2025, 3, 4, 9, 10))

    # drift the stored bucket, then rebuild it
    bucket = world.performance.get(emp.user_id, 3, 2025)
    world.performance.apply_delta(bucket.performance_id, PerformanceDelta(tasks_completed=5, task_points=50))

    with pytest.raises(AuthorizationError):
        world.container.performance_service.recalculate(cast.tech_head.as_actor(), emp.user_id, month=3, year=2025)

    rebuilt = world.container.performance_service.recalculate(cast.cofounder.as_actor(), emp.user_id, month=3, year=2025)
    assert rebuilt.tasks_completed == 1
    assert rebuilt.late_logins == 1
    assert rebuilt.total_score == 5
