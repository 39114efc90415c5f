from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Left before the half-day threshold."""

    def decide_logout(self, *, login_time: datetime, logout_time: datetime, current: AttendanceStatus) -> StatusDecision:
        worked = int((logout_time - login_time).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.HALF_DAY, note=f"worked {max(worked, 0)} minutes")
