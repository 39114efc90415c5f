from __future__ import annotations

from datetime import date, datetime, time, tzinfo
from typing import Callable, Optional, Tuple

# Zero-argument source of the current company-local (naive) time.
Clock = Callable[[], datetime]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hh_mm(value: str) -> time:
    """Parse an HH:MM string into a time."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def now_local(tz: Optional[tzinfo] = None) -> datetime:
    """Current wall-clock time in ``tz`` (the server's zone when None), naive.

    Note: Wrapped so tests can patch/mocked easier.
    """
    if tz is None:
        return datetime.now()
    return datetime.now(tz).replace(tzinfo=None)


def month_bounds(month: int, year: int) -> Tuple[datetime, datetime]:
    """Half-open ``[start, end)`` datetime range covering one calendar month."""
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end
