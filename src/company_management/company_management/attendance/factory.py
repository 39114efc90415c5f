from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.constants import DEFAULT_HALF_DAY_MINUTES
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    half_day_minutes: int = DEFAULT_HALF_DAY_MINUTES

    def for_logout(self, *, login_time: datetime, logout_time: datetime) -> AttendanceStrategy:
        if logout_time < login_time + timedelta(minutes=self.half_day_minutes):
            return HalfDayStrategy()
        return PresentStrategy()
