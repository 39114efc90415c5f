from __future__ import annotations

import os
from datetime import datetime

import pytest

from src.company_management.company_management.core.enums import Department, NotificationType, Role, TaskStatus
from src.company_management.company_management.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

DONE_AT = datetime(2025, 3, 12, 15, 0)


def _stored_files(world):
    if not os.path.isdir(world.storage.upload_dir):
        return []
    return os.listdir(world.storage.upload_dir)


def _assign(world, head, employee, title="Ship the report"):
    return world.container.task_service.create(
        head.as_actor(), title=title, assigned_to=employee.user_id, priority="high", due_date="2025-03-31"
    )


def test_founder_to_head_to_employee_task_completion(world, upload):
    founder = world.user("Fay Founder", Role.FOUNDER)
    users = world.container.user_service
    tasks = world.container.task_service

    head = users.create(
        founder.as_actor(),
        name="Tess Techhead",
        email="tess@example.com",
        password="secret123",
        role="technical_head",
        department="technical",
    )
    employee = users.create(
        head.as_actor(),
        name="Eve Engineer",
        email="eve@example.com",
        password="secret123",
        role="employee",
        department="technical",
    )
    task = tasks.create(head.as_actor(), title="Quarterly numbers", assigned_to=employee.user_id)
    assert task.department == Department.TECHNICAL

    completed, submission = tasks.complete_with_submission(
        employee.as_actor(), task.task_id, upload("numbers.csv", b"a,b\n1,2\n"), now=DONE_AT
    )

    assert completed.status == TaskStatus.COMPLETED
    assert completed.completed_at == DONE_AT
    assert submission.file_type == "csv"
    assert len(world.tasks.submissions) == 1
    assert os.path.isfile(submission.file_path)

    bucket = world.performance.get(employee.user_id, 3, 2025)
    assert bucket.tasks_completed == 1
    assert bucket.task_points == 10
    assert bucket.total_score == 10

    assigned = world.notifications.for_user(employee.user_id)
    assert [n.type for n in assigned] == [NotificationType.TASK_ASSIGNED]
    done = world.notifications.for_user(head.user_id)
    assert [n.type for n in done] == [NotificationType.TASK_COMPLETED]


def test_second_submission_is_a_conflict_and_leaves_no_file(world, cast, upload):
    tasks = world.container.task_service
    task = _assign(world, cast.tech_head, cast.tech_emp)
    tasks.complete_with_submission(cast.tech_emp.as_actor(), task.task_id, upload("first.pdf"), now=DONE_AT)
    files_before = _stored_files(world)

    with pytest.raises(ConflictError):
        tasks.complete_with_submission(cast.tech_emp.as_actor(), task.task_id, upload("second.pdf"), now=DONE_AT)

    assert len(world.tasks.submissions) == 1
    assert _stored_files(world) == files_before
    assert world.performance.get(cast.tech_emp.user_id, 3, 2025).tasks_completed == 1


def test_losing_a_completion_race_removes_its_file(world, cast, upload, monkeypatch):
    tasks = world.container.task_service
    task = _assign(world, cast.tech_head, cast.tech_emp)

    def already_done(task_id, **kwargs):
        raise ConflictError("Task is already completed")

    monkeypatch.setattr(world.tasks, "complete_with_submission", already_done)

    with pytest.raises(ConflictError):
        tasks.complete_with_submission(cast.tech_emp.as_actor(), task.task_id, upload("late.pdf"), now=DONE_AT)

    assert _stored_files(world) == []
    assert world.performance.rows == {}


@pytest.mark.parametrize("name,content", [("notes.txt", b"hello"), ("empty.pdf", b"")])
def test_invalid_upload_is_rejected(world, cast, upload, name, content):
    task = _assign(world, cast.tech_head, cast.tech_emp)

    with pytest.raises(ValidationError) as exc:
        world.container.task_service.complete_with_submission(
            cast.tech_emp.as_actor(), task.task_id, upload(name, content)
        )

    assert exc.value.fields == ["completionFile"]
    assert _stored_files(world) == []
    assert world.tasks.get_by_id(task.task_id).status == TaskStatus.PENDING


@pytest.mark.parametrize(
    "name,stored_name,file_type",
    [
        ("Quarterly Report.PDF", "Quarterly_Report.PDF", "pdf"),
        ("отчёт.csv", "submission.csv", "csv"),
    ],
)
def test_valid_upload_names_are_accepted(world, cast, upload, name, stored_name, file_type):
    task = _assign(world, cast.tech_head, cast.tech_emp)

    _, submission = world.container.task_service.complete_with_submission(
        cast.tech_emp.as_actor(), task.task_id, upload(name, b"a,b\n1,2\n"), now=DONE_AT
    )

    assert submission.file_name == stored_name
    assert submission.file_type == file_type
    assert os.path.isabs(submission.file_path)
    assert _stored_files(world) == [os.path.basename(submission.file_path)]


def test_missing_upload_is_rejected(world, cast):
    task = _assign(world, cast.tech_head, cast.tech_emp)
    with pytest.raises(ValidationError):
        world.container.task_service.complete_with_submission(cast.tech_emp.as_actor(), task.task_id, None)


def test_only_assignee_can_complete(world, cast, upload):
    task = _assign(world, cast.tech_head, cast.tech_emp)
    with pytest.raises(AuthorizationError):
        world.container.task_service.complete_with_submission(
            cast.tech_head.as_actor(), task.task_id, upload("by-head.pdf")
        )
    assert _stored_files(world) == []


def test_sales_head_is_denied_everything_on_a_technical_task(world, cast, upload):
    tasks = world.container.task_service
    task = _assign(world, cast.tech_head, cast.tech_emp)
    sales_head = cast.sales_head.as_actor()

    assert task.task_id not in {t.task_id for t in tasks.list_visible(sales_head)}
    with pytest.raises(AuthorizationError):
        tasks.get(sales_head, task.task_id)
    with pytest.raises(AuthorizationError):
        tasks.update(sales_head, task.task_id, {"title": "Hijacked"})
    with pytest.raises(AuthorizationError):
        tasks.delete(sales_head, task.task_id)
    with pytest.raises(AuthorizationError):
        tasks.create(sales_head, title="Cross", assigned_to=cast.tech_emp.user_id)

    tasks.complete_with_submission(cast.tech_emp.as_actor(), task.task_id, upload("done.pdf"), now=DONE_AT)
    with pytest.raises(AuthorizationError):
        tasks.submission_file(sales_head, task.task_id)
    assert tasks.submission_file(cast.founder.as_actor(), task.task_id).file_type == "pdf"
    assert world.tasks.get_by_id(task.task_id).title == "Ship the report"


def test_assignee_moves_status_forward_only(world, cast):
    tasks = world.container.task_service
    task = _assign(world, cast.tech_head, cast.tech_emp)
    me = cast.tech_emp.as_actor()

    assert tasks.update(me, task.task_id, {"status": "review"}).status == TaskStatus.REVIEW
    with pytest.raises(ValidationError):
        tasks.update(me, task.task_id, {"status": "in-progress"})
    with pytest.raises(ValidationError):
        tasks.update(me, task.task_id, {"status": "completed"})
    with pytest.raises(AuthorizationError):
        tasks.update(me, task.task_id, {"title": "Easier task"})


def test_manager_completion_by_update_scores_without_self_notification(world, cast):
    tasks = world.container.task_service
    task = _assign(world, cast.tech_head, cast.tech_emp)

    done = tasks.update(cast.tech_head.as_actor(), task.task_id, {"status": "completed"}, now=DONE_AT)

    assert done.status == TaskStatus.COMPLETED
    assert world.performance.get(cast.tech_emp.user_id, 3, 2025).total_score == 10
    assert world.notifications.for_user(cast.tech_head.user_id) == []

    with pytest.raises(ConflictError):
        tasks.update(cast.tech_head.as_actor(), task.task_id, {"status": "review"})


def test_reassignment_follows_new_assignee_department(world, cast):
    tasks = world.container.task_service
    task = _assign(world, cast.tech_head, cast.tech_emp)

    moved = tasks.update(cast.founder.as_actor(), task.task_id, {"assigned_to": cast.sales_emp.user_id})
    assert moved.assigned_to == cast.sales_emp.user_id
    assert moved.department == Department.SALES

    with pytest.raises(AuthorizationError):
        tasks.get(cast.tech_head.as_actor(), task.task_id)
    assert tasks.get(cast.sales_head.as_actor(), task.task_id).task_id == task.task_id


def test_delete_removes_submission_file(world, cast, upload):
    tasks = world.container.task_service
    task = _assign(world, cast.tech_head, cast.tech_emp)
    _, submission = tasks.complete_with_submission(
        cast.tech_emp.as_actor(), task.task_id, upload("report.pdf"), now=DONE_AT
    )

    tasks.delete(cast.tech_head.as_actor(), task.task_id)

    assert not os.path.exists(submission.file_path)
    with pytest.raises(NotFoundError):
        tasks.get(cast.founder.as_actor(), task.task_id)


def test_create_validates_fields(world, cast):
    tasks = world.container.task_service
    head = cast.tech_head.as_actor()
    with pytest.raises(ValidationError):
        tasks.create(head, title="  ", assigned_to=cast.tech_emp.user_id)
    with pytest.raises(ValidationError):
        tasks.create(head, title="Dated", assigned_to=cast.tech_emp.user_id, due_date="31/03/2025")
    with pytest.raises(ValidationError):
        tasks.create(head, title="Nobody", assigned_to=4242)
    with pytest.raises(ValidationError):
        tasks.create(head, title="Odd", assigned_to=cast.tech_emp.user_id, priority="urgent")
