from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..common.datetime_utils import now_local, parse_hh_mm
from ..core.constants import LATE_LOGIN_POINTS, LATE_LOGIN_THRESHOLD, TASK_COMPLETED_POINTS


def resolve_timezone(name: str) -> tzinfo:
    if name.strip().upper() in {"UTC", "ETC/UTC"}:
        return timezone.utc
    try:
        return ZoneInfo(name.strip())
    except ZoneInfoNotFoundError as exc:
        raise ValueError(f"Unknown COMPANY_TIMEZONE: {name!r}") from exc


@dataclass(frozen=True)
class ScoringPolicy:
    """Process-wide scoring rules, built once from settings at startup.

    Aware timestamps are converted to the company timezone before the
    late-login comparison; naive ones are taken as company-local already.
    """

    task_completed_points: int = TASK_COMPLETED_POINTS
    late_login_points: int = LATE_LOGIN_POINTS
    late_after: time = LATE_LOGIN_THRESHOLD
    timezone_name: str = "UTC"
    tz: tzinfo = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.late_login_points > 0:
            raise ValueError("late_login_points must not be positive")
        object.__setattr__(self, "tz", resolve_timezone(self.timezone_name))

    @classmethod
    def from_settings(cls, settings) -> "ScoringPolicy":
        threshold = getattr(settings, "LATE_LOGIN_THRESHOLD", None)
        return cls(
            task_completed_points=int(getattr(settings, "TASK_COMPLETED_POINTS", TASK_COMPLETED_POINTS)),
            late_login_points=int(getattr(settings, "LATE_LOGIN_POINTS", LATE_LOGIN_POINTS)),
            late_after=parse_hh_mm(threshold) if isinstance(threshold, str) else (threshold or LATE_LOGIN_THRESHOLD),
            timezone_name=str(getattr(settings, "COMPANY_TIMEZONE", "UTC")),
        )

    def now(self) -> datetime:
        """Current company-local time, naive, as stored in the database."""
        return now_local(self.tz)

    def company_time(self, moment: datetime) -> datetime:
        if moment.tzinfo is None:
            return moment
        return moment.astimezone(self.tz)

    def is_late(self, login_time: datetime) -> bool:
        # Minute granularity: 09:30:59 is still on time.
        local = self.company_time(login_time)
        return (local.hour, local.minute) > (self.late_after.hour, self.late_after.minute)

    def period_of(self, moment: datetime) -> tuple[int, int]:
        local = self.company_time(moment)
        return local.month, local.year
