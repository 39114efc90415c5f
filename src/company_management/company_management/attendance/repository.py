from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..access.policy import Scope
from ..core.enums import AttendanceStatus, Role
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_for_login(
        self,
        *,
        user_id: int,
        work_date: date,
        login_time: datetime,
        status: AttendanceStatus,
        department: str,
        role: Role,
    ) -> int:
        """Insert the day's row; raises ConflictError if (user, date) already exists."""
        raise NotImplementedError

    def set_logout(self, attendance_id: int, *, logout_time: datetime, status: AttendanceStatus) -> bool:
        """Set logout time and status unless a logout time is already recorded."""
        raise NotImplementedError

    def list_visible(
        self,
        scope: Scope,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user_between(self, user_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        """Rows with ``start <= work_date < end``."""
        raise NotImplementedError
