from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..access.policy import Target
from ..core.enums import AttendanceStatus, Role


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one user's attendance for one calendar day.

    ``department`` and ``role`` are snapshots taken when the row was created.
    """

    attendance_id: int
    user_id: int
    work_date: date
    login_time: datetime
    logout_time: Optional[datetime]
    status: AttendanceStatus
    department: str
    role: Role
    user_name: Optional[str] = None

    def owner(self) -> Target:
        return Target(user_id=self.user_id, role=self.role, department=self.department)

    def worked_minutes(self) -> int:
        if not self.logout_time:
            return 0
        return max(int((self.logout_time - self.login_time).total_seconds() // 60), 0)

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.attendance_id,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "date": self.work_date.isoformat(),
            "login_time": self.login_time.isoformat(),
            "logout_time": self.logout_time.isoformat() if self.logout_time else None,
            "status": self.status.value,
            "department": self.department,
            "role": self.role.value,
            "worked_minutes": self.worked_minutes(),
        }
