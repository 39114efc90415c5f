from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytest

from src.company_management.company_management.common import datetime_utils
from src.company_management.company_management.core.enums import AttendanceStatus, Department, NotificationType, Role
from src.company_management.company_management.core.exceptions import (
    AuthenticationError,
    ConflictError,
    ValidationError,
)
from src.company_management.company_management.performance.policy import ScoringPolicy

PASSWORD = "secret123"


def test_register_returns_token_for_new_user(world):
    auth = world.container.auth_service
    result = auth.register(
        name="Nia", email="nia@example.com", password="secret123", role="employee", department="finance"
    )

    assert result.user.department == Department.FINANCE
    assert auth.authenticate_token(result.token).user_id == result.user.user_id

    with pytest.raises(ConflictError):
        auth.register(name="Nia 2", email="NIA@example.com", password="secret123", role="employee", department="sales")


def test_register_requires_department_for_employee(world):
    with pytest.raises(ValidationError) as exc:
        world.container.auth_service.register(name="Nia", email="nia@example.com", password="secret123", role="employee")
    assert exc.value.fields == ["department"]


def test_login_opens_attendance_once_per_day(world, cast):
    auth = world.container.auth_service

    first = auth.login(cast.tech_emp.email, PASSWORD, now=datetime(2025, 3, 10, 9, 0))
    second = auth.login(cast.tech_emp.email, PASSWORD, now=datetime(2025, 3, 10, 13, 0))

    assert first.attendance.attendance_id == second.attendance.attendance_id
    assert second.attendance.login_time == datetime(2025, 3, 10, 9, 0)
    assert first.attendance.status == AttendanceStatus.PRESENT
    assert len(world.attendance.rows) == 1

    notes = world.notifications.for_user(cast.tech_emp.user_id)
    assert [n.type for n in notes] == [NotificationType.LOGIN_SUCCESS] * 2


def test_late_first_login_is_scored_once(world, cast):
    auth = world.container.auth_service

    auth.login(cast.tech_emp.email, PASSWORD, now=datetime(2025, 3, 10, 9, 45))
    auth.login(cast.tech_emp.email, PASSWORD, now=datetime(2025, 3, 10, 10, 15))

    bucket = world.performance.get(cast.tech_emp.user_id, 3, 2025)
    assert bucket.late_logins == 1
    assert bucket.late_login_penalty == -5
    assert bucket.total_score == -5


def test_login_at_threshold_minute_is_on_time(world, cast):
    world.container.auth_service.login(cast.tech_emp.email, PASSWORD, now=datetime(2025, 3, 10, 9, 30, 59))
    assert world.performance.get(cast.tech_emp.user_id, 3, 2025) is None


def test_founder_late_login_keeps_no_bucket(world, cast):
    result = world.container.auth_service.login(cast.founder.email, PASSWORD, now=datetime(2025, 3, 10, 11, 0))
    assert result.attendance.department == "management"
    assert world.performance.rows == {}


def test_bad_credentials(world, cast):
    auth = world.container.auth_service
    with pytest.raises(AuthenticationError):
        auth.login(cast.tech_emp.email, "wrong-password")
    with pytest.raises(AuthenticationError):
        auth.login("nobody@example.com", PASSWORD)
    with pytest.raises(ValidationError):
        auth.login("", "")


def test_inactive_user_cannot_log_in_or_use_token(world):
    ghost = world.user("Gus Ghost", Role.EMPLOYEE, Department.SALES, is_active=False)
    auth = world.container.auth_service

    with pytest.raises(AuthenticationError):
        auth.login(ghost.email, PASSWORD)
    with pytest.raises(AuthenticationError):
        auth.authenticate_token(world.token_for(ghost))


def test_tokens_are_verified(world, cast):
    auth = world.container.auth_service
    with pytest.raises(AuthenticationError):
        auth.authenticate_token(None)
    with pytest.raises(AuthenticationError):
        auth.authenticate_token("not-a-jwt")
    assert auth.authenticate_token(world.token_for(cast.sales_emp)).user_id == cast.sales_emp.user_id


def test_logout_sets_half_day_for_short_day(world, cast):
    auth = world.container.auth_service
    auth.login(cast.sales_emp.email, PASSWORD, now=datetime(2025, 3, 10, 9, 0))

    record = auth.logout(cast.sales_emp, now=datetime(2025, 3, 10, 11, 0))
    assert record.status == AttendanceStatus.HALF_DAY
    assert record.logout_time == datetime(2025, 3, 10, 11, 0)

    again = auth.logout(cast.sales_emp, now=datetime(2025, 3, 10, 18, 0))
    assert again.logout_time == datetime(2025, 3, 10, 11, 0)


def test_logout_after_full_day_stays_present(world, cast):
    auth = world.container.auth_service
    auth.login(cast.sales_emp.email, PASSWORD, now=datetime(2025, 3, 10, 9, 0))
    record = auth.logout(cast.sales_emp, now=datetime(2025, 3, 10, 17, 30))
    assert record.status == AttendanceStatus.PRESENT
    assert record.worked_minutes() == 510


class _ServerClock(datetime):
    """Server clock frozen at 04:30 UTC on 2 March 2026 (10:00 in Kolkata)."""

    INSTANT = datetime(2026, 3, 2, 4, 30, tzinfo=timezone.utc)

    @classmethod
    def now(cls, tz=None):
        if tz is None:
            return cls.INSTANT.replace(tzinfo=None)
        return cls.INSTANT.astimezone(tz)


def test_login_without_explicit_time_uses_company_timezone(world_factory, monkeypatch):
    try:
        ZoneInfo("Asia/Kolkata")
    except ZoneInfoNotFoundError:
        pytest.skip("no tz database available")
    monkeypatch.setattr(datetime_utils, "datetime", _ServerClock)

    kolkata = world_factory(scoring=ScoringPolicy(timezone_name="Asia/Kolkata"))
    emp = kolkata.user("Ravi Rao", Role.EMPLOYEE, Department.TECHNICAL)

    result = kolkata.container.auth_service.login(emp.email, PASSWORD)

    assert result.attendance.work_date == date(2026, 3, 2)
    assert result.attendance.login_time == datetime(2026, 3, 2, 10, 0)
    bucket = kolkata.performance.get(emp.user_id, 3, 2026)
    assert bucket is not None
    assert bucket.late_logins == 1
