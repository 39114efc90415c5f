from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how the day's final status is decided at logout."""

    @abstractmethod
    def decide_logout(self, *, login_time: datetime, logout_time: datetime, current: AttendanceStatus) -> StatusDecision:
        raise NotImplementedError
