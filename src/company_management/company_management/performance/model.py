from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.enums import Department, Role


@dataclass(frozen=True)
class Performance:
    """Monthly score bucket of one employee."""

    performance_id: int
    employee_id: int
    month: int
    year: int
    department: Department
    tasks_completed: int = 0
    late_logins: int = 0
    approved_leaves: int = 0
    task_points: int = 0
    late_login_penalty: int = 0
    total_score: int = 0
    employee_name: Optional[str] = None
    employee_role: Optional[Role] = None

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.performance_id or None,
            "employee": {
                "id": self.employee_id,
                "name": self.employee_name,
                "role": self.employee_role.value if self.employee_role else None,
            },
            "month": self.month,
            "year": self.year,
            "department": self.department.value if self.department else None,
            "tasks_completed": self.tasks_completed,
            "late_logins": self.late_logins,
            "approved_leaves": self.approved_leaves,
            "score_breakdown": {
                "task_points": self.task_points,
                "late_login_penalty": self.late_login_penalty,
            },
            "total_score": self.total_score,
        }


@dataclass(frozen=True)
class PerformanceDelta:
    """Increments applied to a bucket in one atomic update."""

    tasks_completed: int = 0
    late_logins: int = 0
    approved_leaves: int = 0
    task_points: int = 0
    late_login_penalty: int = 0


@dataclass(frozen=True)
class PerformanceCounters:
    """Absolute counter values, used when a bucket is recomputed from history."""

    tasks_completed: int
    late_logins: int
    approved_leaves: int
    task_points: int
    late_login_penalty: int

    @property
    def total_score(self) -> int:
        return self.task_points + self.late_login_penalty


@dataclass(frozen=True)
class DepartmentSummary:
    department: Department
    month: int
    year: int
    employee_count: int
    average_score: float
    total_tasks_completed: int
    total_late_logins: int
    top_performer: Optional[Performance]

    def to_public(self) -> Dict[str, Any]:
        return {
            "department": self.department.value,
            "month": self.month,
            "year": self.year,
            "employee_count": self.employee_count,
            "average_score": self.average_score,
            "total_tasks_completed": self.total_tasks_completed,
            "total_late_logins": self.total_late_logins,
            "top_performer": self.top_performer.to_public() if self.top_performer else None,
        }
