from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..access.policy import Target
from ..core.enums import Department, Role, TaskPriority, TaskStatus

STATUS_ORDER = list(TaskStatus)


@dataclass(frozen=True)
class Task:
    task_id: int
    title: str
    description: Optional[str]
    assigned_to: int
    assigned_by: int
    department: Optional[Department]
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    assignee_role: Optional[Role] = None
    assignee_name: Optional[str] = None

    def assignee(self) -> Target:
        """Visibility and mutation checks on a task are checks on its assignee."""
        return Target(user_id=self.assigned_to, role=self.assignee_role, department=self.department)

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.task_id,
            "title": self.title,
            "description": self.description,
            "assigned_to": {"id": self.assigned_to, "name": self.assignee_name},
            "assigned_by": self.assigned_by,
            "department": self.department.value if self.department else None,
            "status": self.status.value,
            "priority": self.priority.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class TaskSubmission:
    submission_id: int
    task_id: int
    submitted_by: int
    file_name: str
    file_type: str
    file_size: int
    file_path: str
    department: Optional[Department]
    submitted_at: datetime

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.submission_id,
            "task_id": self.task_id,
            "submitted_by": self.submitted_by,
            "file_name": self.file_name,
            "file_type": self.file_type,
            "file_size": self.file_size,
            "department": self.department.value if self.department else None,
            "submitted_at": self.submitted_at.isoformat(),
        }
