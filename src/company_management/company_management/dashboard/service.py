from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict

from ..access.policy import Actor, own_records, visibility_filter
from ..access.roles import as_role, department_of, is_department_head
from ..common.datetime_utils import Clock, now_local
from ..core.enums import AttendanceStatus, RequestStatus, Role, TaskStatus
from ..core.exceptions import AuthorizationError
from ..attendance.repository import AttendanceRepository
from ..requests.repository import RequestRepository
from ..salary.repository import SalaryRepository
from ..tasks.repository import TaskRepository
from ..users.repository import UserRepository

_RECENT_ITEMS = 5
_ATTENDANCE_WINDOW_DAYS = 30


class DashboardService:
    """Role-specific landing page summary.

    Everything is computed from the same scope-filtered reads the resource
    endpoints use, so the counts never reveal records the actor cannot list.
    """

    def __init__(
        self,
        *,
        users: UserRepository,
        tasks: TaskRepository,
        attendance: AttendanceRepository,
        salaries: SalaryRepository,
        requests: RequestRepository,
        clock: Clock = now_local,
    ):
        self._users = users
        self._tasks = tasks
        self._attendance = attendance
        self._salaries = salaries
        self._requests = requests
        self._clock = clock

    def summary(self, actor: Actor) -> Dict[str, Any]:
        role = as_role(actor.role)
        if role is None:
            raise AuthorizationError("Unknown role")
        if role == Role.EMPLOYEE:
            return self._employee(actor)
        if is_department_head(role):
            return self._department_head(actor)
        return self._management(actor, role)

    def _management(self, actor: Actor, role: Role) -> Dict[str, Any]:
        scope = visibility_filter(actor)
        users = [u for u in self._users.list_visible(scope) if u.user_id != actor.user_id]
        tasks = self._tasks.list_visible(scope)
        pending = self._requests.list_visible(scope, status=RequestStatus.PENDING)
        return {
            "role": role.value,
            "scope": scope.describe(),
            "stats": {
                "total_users": len(users),
                "active_employees": sum(1 for u in users if u.is_active and u.role == Role.EMPLOYEE),
                "department_heads": sum(1 for u in users if is_department_head(u.role)),
                "total_tasks": len(tasks),
                "open_tasks": sum(1 for t in tasks if t.status != TaskStatus.COMPLETED),
                "pending_requests": len(pending),
            },
        }

    def _department_head(self, actor: Actor) -> Dict[str, Any]:
        scope = visibility_filter(actor)
        team = [u for u in self._users.list_visible(scope) if u.user_id != actor.user_id]
        tasks = self._tasks.list_visible(scope)
        pending = self._requests.list_visible(scope, status=RequestStatus.PENDING)
        department = department_of(actor.role)
        return {
            "role": as_role(actor.role).value,
            "department": department.value if department else None,
            "stats": {
                "team_size": len(team),
                "active_tasks": sum(1 for t in tasks if t.status != TaskStatus.COMPLETED),
                "completed_tasks": sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
                "pending_requests": len(pending),
            },
            "recent_tasks": [t.to_public() for t in tasks[:_RECENT_ITEMS]],
        }

    def _employee(self, actor: Actor) -> Dict[str, Any]:
        mine = own_records(actor)
        tasks = self._tasks.list_visible(mine)
        today = self._clock().date()
        attendance = self._attendance.list_visible(
            mine, start=today - timedelta(days=_ATTENDANCE_WINDOW_DAYS - 1), end=today
        )
        salaries = self._salaries.list_visible(mine)
        requests = self._requests.list_visible(mine, status=RequestStatus.PENDING)
        return {
            "role": Role.EMPLOYEE.value,
            "department": actor.department.value if actor.department else None,
            "stats": {
                "pending_tasks": sum(1 for t in tasks if t.status != TaskStatus.COMPLETED),
                "completed_tasks": sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
                "attendance_days": sum(1 for a in attendance if a.status == AttendanceStatus.PRESENT),
                "pending_requests": len(requests),
            },
            "recent_tasks": [t.to_public() for t in tasks[:_RECENT_ITEMS]],
            "recent_attendance": [a.to_public() for a in attendance[:_RECENT_ITEMS]],
            "latest_salary": salaries[0].to_public() if salaries else None,
        }
