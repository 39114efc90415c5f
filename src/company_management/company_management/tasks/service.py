from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence, Tuple

from werkzeug.datastructures import FileStorage

from ..access.policy import Actor, can_access_record, can_mutate, visibility_filter
from ..common.datetime_utils import Clock, now_local, parse_iso_date
from ..common.validators import parse_enum, parse_optional_enum, require_max_length, require_non_empty
from ..core.constants import MAX_DESCRIPTION_LENGTH
from ..core.enums import TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..hooks import PostCommitHooks
from ..users.model import User
from ..users.repository import UserRepository
from .model import STATUS_ORDER, Task, TaskSubmission
from .repository import TaskRepository
from .storage import SubmissionStorage

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {"title", "description", "assigned_to", "status", "priority", "due_date"}


def _parse_due_date(value: Any) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value)[:10])
    except ValueError:
        raise ValidationError("due_date must use YYYY-MM-DD", ["due_date"])


class TaskService:
    """Use cases around tasks.

    Every check is made against the task's assignee: who may see it, who may
    change it. The assignee alone may move the status forward (short of
    completed) and may complete it by submitting a file.
    """

    def __init__(
        self,
        tasks: TaskRepository,
        users: UserRepository,
        storage: SubmissionStorage,
        hooks: PostCommitHooks,
        *,
        clock: Clock = now_local,
    ):
        self._tasks = tasks
        self._users = users
        self._storage = storage
        self._hooks = hooks
        self._clock = clock

    def _get_or_404(self, task_id: Any) -> Task:
        try:
            tid = int(task_id)
        except (TypeError, ValueError):
            raise ValidationError("task id must be an integer", ["id"])
        task = self._tasks.get_by_id(tid)
        if not task:
            raise NotFoundError("Task not found")
        return task

    def _assignee(self, user_id: Any) -> User:
        try:
            uid = int(user_id)
        except (TypeError, ValueError):
            raise ValidationError("assigned_to must be a user id", ["assigned_to"])
        user = self._users.get_by_id(uid)
        if not user:
            raise ValidationError("assigned_to does not refer to an existing user", ["assigned_to"])
        return user

    def list_visible(self, actor: Actor, *, status: Any = None) -> Sequence[Task]:
        return self._tasks.list_visible(
            visibility_filter(actor), status=parse_optional_enum(TaskStatus, status, "status")
        )

    def get(self, actor: Actor, task_id: Any) -> Task:
        task = self._get_or_404(task_id)
        if not can_access_record(actor, task.assignee()):
            raise AuthorizationError("You do not have permission to view this task")
        return task

    def create(
        self,
        actor: Actor,
        *,
        title: Any,
        assigned_to: Any,
        description: Any = None,
        priority: Any = None,
        due_date: Any = None,
    ) -> Task:
        title = require_non_empty(title, "title")
        require_max_length(title, "title", 200)
        require_max_length(description, "description", MAX_DESCRIPTION_LENGTH)
        prio = parse_enum(TaskPriority, priority, "priority") if priority else TaskPriority.MEDIUM
        due = _parse_due_date(due_date)

        assignee = self._assignee(assigned_to)
        if not can_mutate(actor, assignee.as_target()):
            raise AuthorizationError("You cannot assign tasks to this user")

        task_id = self._tasks.create(
            title=title,
            description=(description or None),
            assigned_to=assignee.user_id,
            assigned_by=actor.user_id,
            department=assignee.department,
            priority=prio,
            due_date=due,
        )
        task = self._tasks.get_by_id(task_id)
        logger.info("task %s assigned to %s by %s", task_id, assignee.user_id, actor.user_id)
        self._hooks.after_task_assigned(task)
        return task

    def _self_update(self, task: Task, changes: Dict[str, Any]) -> TaskStatus:
        """The assignee's own update: status only, forward only, never to completed."""
        other = sorted(set(changes) - {"status"})
        if other:
            raise AuthorizationError("Assignees can only update the status of their tasks")
        if "status" not in changes:
            raise ValidationError("status is required", ["status"])
        status = parse_enum(TaskStatus, changes["status"], "status")
        if status == TaskStatus.COMPLETED:
            raise ValidationError("submit a completion file to complete a task", ["status"])
        if STATUS_ORDER.index(status) < STATUS_ORDER.index(task.status):
            raise ValidationError(f"status cannot move back from {task.status.value}", ["status"])
        return status

    def update(self, actor: Actor, task_id: Any, changes: Dict[str, Any], *, now: Optional[datetime] = None) -> Task:
        task = self._get_or_404(task_id)
        unknown = sorted(set(changes) - _EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"unknown fields: {', '.join(unknown)}", unknown)

        manager = can_mutate(actor, task.assignee())
        if not manager and task.assigned_to != actor.user_id:
            raise AuthorizationError("You do not have permission to update this task")
        if task.status == TaskStatus.COMPLETED:
            raise ConflictError("Completed tasks cannot be changed")

        if not manager:
            status = self._self_update(task, changes)
            fields = dict(
                title=task.title,
                description=task.description,
                assigned_to=task.assigned_to,
                department=task.department,
                priority=task.priority,
                due_date=task.due_date,
            )
        else:
            status = parse_enum(TaskStatus, changes["status"], "status") if "status" in changes else task.status
            assigned_to, department = task.assigned_to, task.department
            if "assigned_to" in changes:
                assignee = self._assignee(changes["assigned_to"])
                if assignee.user_id != task.assigned_to:
                    if not can_mutate(actor, assignee.as_target()):
                        raise AuthorizationError("You cannot assign tasks to this user")
                    assigned_to, department = assignee.user_id, assignee.department
            title = task.title
            if "title" in changes:
                title = require_non_empty(changes["title"], "title")
                require_max_length(title, "title", 200)
            description = changes.get("description", task.description)
            require_max_length(description, "description", MAX_DESCRIPTION_LENGTH)
            fields = dict(
                title=title,
                description=description or None,
                assigned_to=assigned_to,
                department=department,
                priority=(
                    parse_enum(TaskPriority, changes["priority"], "priority")
                    if "priority" in changes
                    else task.priority
                ),
                due_date=_parse_due_date(changes["due_date"]) if "due_date" in changes else task.due_date,
            )

        completing = status == TaskStatus.COMPLETED
        completed_at = (now or self._clock()) if completing else None
        if not self._tasks.update(task.task_id, status=status, completed_at=completed_at, **fields):
            raise ConflictError("Task was completed concurrently")

        updated = self._tasks.get_by_id(task.task_id)
        if completing:
            logger.info("task %s marked completed by %s", task.task_id, actor.user_id)
            self._hooks.after_task_completed(updated, completed_by=actor.user_id, now=completed_at)
        return updated

    def delete(self, actor: Actor, task_id: Any) -> None:
        task = self._get_or_404(task_id)
        if not can_mutate(actor, task.assignee()):
            raise AuthorizationError("You do not have permission to delete this task")
        submission = self._tasks.get_submission(task.task_id)
        self._tasks.delete(task.task_id)
        if submission:
            self._storage.delete_if_exists(submission.file_path)
        logger.info("task %s deleted by %s", task.task_id, actor.user_id)

    def complete_with_submission(
        self,
        actor: Actor,
        task_id: Any,
        upload: Optional[FileStorage],
        *,
        now: Optional[datetime] = None,
    ) -> Tuple[Task, TaskSubmission]:
        """Assignee completes the task by uploading a pdf/csv deliverable.

        The file is written first and then validated; the status change and
        the submission row are committed together. Whatever fails after the
        file hits the disk, the file is removed again.
        """

        task = self._get_or_404(task_id)
        if task.assigned_to != actor.user_id:
            raise AuthorizationError("Only the assignee can complete this task")
        if task.status == TaskStatus.COMPLETED:
            raise ConflictError("Task is already completed")

        stored = self._storage.save(upload, prefix=f"task-{task.task_id}")
        completed_at = now or self._clock()
        try:
            self._tasks.complete_with_submission(
                task.task_id,
                submitted_by=actor.user_id,
                file_name=stored.original_name,
                file_type=stored.extension,
                file_size=stored.size,
                file_path=stored.path,
                department=task.department,
                completed_at=completed_at,
            )
        except Exception:
            self._storage.delete_if_exists(stored.path)
            raise

        completed = self._tasks.get_by_id(task.task_id)
        submission = self._tasks.get_submission(task.task_id)
        logger.info("task %s completed by %s with %s", task.task_id, actor.user_id, stored.extension)
        self._hooks.after_task_completed(completed, completed_by=actor.user_id, now=completed_at)
        return completed, submission

    def get_submission(self, actor: Actor, task_id: Any) -> TaskSubmission:
        task = self.get(actor, task_id)
        submission = self._tasks.get_submission(task.task_id)
        if not submission:
            raise NotFoundError("No submission for this task")
        return submission

    def submission_file(self, actor: Actor, task_id: Any) -> TaskSubmission:
        """Submission whose file is present on disk, for download."""
        submission = self.get_submission(actor, task_id)
        if not self._storage.exists(submission.file_path):
            logger.warning("submission file missing on disk: %s", submission.file_path)
            raise NotFoundError("Submission file not found")
        return submission
