from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..access.policy import Scope
from ..core.enums import Department, TaskPriority, TaskStatus
from .model import Task, TaskSubmission


class TaskRepository(Protocol):
    def get_by_id(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list_visible(self, scope: Scope, *, status: Optional[TaskStatus] = None) -> Sequence[Task]:
        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        description: Optional[str],
        assigned_to: int,
        assigned_by: int,
        department: Optional[Department],
        priority: TaskPriority,
        due_date: Optional[date],
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        task_id: int,
        *,
        title: str,
        description: Optional[str],
        assigned_to: int,
        department: Optional[Department],
        status: TaskStatus,
        priority: TaskPriority,
        due_date: Optional[date],
        completed_at: Optional[datetime],
    ) -> bool:
        """Rewrite the task; refuses (returns False) once it is completed."""
        raise NotImplementedError

    def delete(self, task_id: int) -> bool:
        raise NotImplementedError

    def complete_with_submission(
        self,
        task_id: int,
        *,
        submitted_by: int,
        file_name: str,
        file_type: str,
        file_size: int,
        file_path: str,
        department: Optional[Department],
        completed_at: datetime,
    ) -> int:
        """Mark the task completed and insert its single submission, as one unit.

        Raises ConflictError when the task is already completed or already has
        a submission; nothing is written in that case.
        """
        raise NotImplementedError

    def get_submission(self, task_id: int) -> Optional[TaskSubmission]:
        raise NotImplementedError

    def count_completed_between(self, user_id: int, start: datetime, end: datetime) -> int:
        raise NotImplementedError
