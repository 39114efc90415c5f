from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..access.policy import Actor, can_access_record, own_records, visibility_filter
from ..common.datetime_utils import parse_iso_date
from ..core.constants import MANAGEMENT_DEPARTMENT
from ..core.enums import AttendanceStatus
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..performance.policy import ScoringPolicy
from ..users.model import User
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginAttendance:
    record: AttendanceRecord
    created: bool


class AttendanceService:
    """Use cases: attendance rows are written by login/logout and read under visibility rules."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        strategy_factory: AttendanceStrategyFactory,
        policy: ScoringPolicy,
    ):
        self._attendance = attendance
        self._factory = strategy_factory
        self._policy = policy

    def _work_date(self, moment: datetime) -> date:
        return self._policy.company_time(moment).date()

    def record_login(self, user: User, *, now: Optional[datetime] = None) -> LoginAttendance:
        """Open the day's row on the first login; later logins keep it unchanged."""
        login_time = now or self._policy.now()
        work_date = self._work_date(login_time)

        existing = self._attendance.get_for_user_and_date(user.user_id, work_date)
        if existing:
            return LoginAttendance(record=existing, created=False)

        try:
            attendance_id = self._attendance.create_for_login(
                user_id=user.user_id,
                work_date=work_date,
                login_time=login_time,
                status=AttendanceStatus.PRESENT,
                department=user.department.value if user.department else MANAGEMENT_DEPARTMENT,
                role=user.role,
            )
        except ConflictError:
            # Two logins raced for the same day; the first one owns the row.
            record = self._attendance.get_for_user_and_date(user.user_id, work_date)
            if record is None:
                raise
            return LoginAttendance(record=record, created=False)

        record = self._attendance.get_by_id(attendance_id)
        logger.info("attendance opened for user %s on %s", user.user_id, work_date)
        return LoginAttendance(record=record, created=True)

    def record_logout(self, user: User, *, now: Optional[datetime] = None) -> Optional[AttendanceRecord]:
        logout_time = now or self._policy.now()
        record = self._attendance.get_for_user_and_date(user.user_id, self._work_date(logout_time))
        if not record:
            logger.info("logout without attendance row for user %s", user.user_id)
            return None
        if record.logout_time:
            return record

        strategy = self._factory.for_logout(login_time=record.login_time, logout_time=logout_time)
        decision = strategy.decide_logout(
            login_time=record.login_time, logout_time=logout_time, current=record.status
        )
        self._attendance.set_logout(record.attendance_id, logout_time=logout_time, status=decision.status)
        return self._attendance.get_by_id(record.attendance_id)

    @staticmethod
    def _range(start: Any, end: Any):
        try:
            start_d = parse_iso_date(start) if start else None
            end_d = parse_iso_date(end) if end else None
        except ValueError:
            raise ValidationError("dates must use YYYY-MM-DD", ["start", "end"])
        if start_d and end_d and start_d > end_d:
            raise ValidationError("start must not be after end", ["start", "end"])
        return start_d, end_d

    def list_visible(self, actor: Actor, *, start: Any = None, end: Any = None) -> Sequence[AttendanceRecord]:
        start_d, end_d = self._range(start, end)
        return self._attendance.list_visible(visibility_filter(actor), start=start_d, end=end_d)

    def list_mine(self, actor: Actor, *, start: Any = None, end: Any = None) -> Sequence[AttendanceRecord]:
        start_d, end_d = self._range(start, end)
        return self._attendance.list_visible(own_records(actor), start=start_d, end=end_d)

    def get(self, actor: Actor, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        if not can_access_record(actor, record.owner()):
            raise AuthorizationError("You cannot view this attendance record")
        return record

    def today_login_status(self, actor: Actor, *, now: Optional[datetime] = None) -> dict:
        """Whether today's recorded login counted as late."""
        moment = now or self._policy.now()
        record = self._attendance.get_for_user_and_date(actor.user_id, self._work_date(moment))
        if not record:
            return {"logged_in_today": False, "late": False, "login_time": None}
        return {
            "logged_in_today": True,
            "late": self._policy.is_late(record.login_time),
            "login_time": record.login_time.isoformat(),
            "threshold": self._policy.late_after.strftime("%H:%M"),
        }
