from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """A full day: the status recorded at login stands."""

    def decide_logout(self, *, login_time: datetime, logout_time: datetime, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
