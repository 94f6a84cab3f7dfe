"""
Datetime utilities and clock implementations.

The whole application runs on a single server clock. "Now" is read once per
evaluation pass and passed explicitly into every computation.
"""

from datetime import date, datetime, time
from typing import Optional, Union
from zoneinfo import ZoneInfo

from kpi_tracker.interfaces.clock import IClock


class SystemClock(IClock):
    """Wall clock, optionally pinned to an IANA timezone."""

    def __init__(self, timezone: Optional[str] = None):
        self._tz = ZoneInfo(timezone) if timezone else None

    def now(self) -> datetime:
        if self._tz is None:
            return datetime.now()
        return datetime.now(self._tz)


class FixedClock(IClock):
    """Clock frozen at a given instant (tests, replays, CLI overrides)."""

    def __init__(self, at: datetime):
        self._at = at

    def now(self) -> datetime:
        return self._at


def start_of_day(value: Union[date, datetime]) -> datetime:
    """
    Midnight of the given day, keeping tzinfo for aware datetimes.

    Example:
        >>> start_of_day(datetime(2024, 9, 15, 14, 30))
        datetime(2024, 9, 15, 0, 0)
    """
    if isinstance(value, datetime):
        return datetime.combine(value.date(), time.min, tzinfo=value.tzinfo)
    return datetime.combine(value, time.min)


def to_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: Union[date, datetime], end: Union[date, datetime]) -> int:
    """
    Whole calendar days from ``start`` to ``end`` (negative if end is earlier).

    Times of day are ignored, so Monday 23:59 to Tuesday 00:01 is one day.
    """
    return (to_date(end) - to_date(start)).days


def parse_iso_datetime(value: str) -> datetime:
    """
    Parse an ISO date or datetime string.

    A bare date ("2024-09-15") becomes midnight of that day.

    Raises:
        ValueError: If the string cannot be parsed
    """
    normalized = value.strip().replace("Z", "+00:00")
    if len(normalized) == 10:
        return datetime.combine(date.fromisoformat(normalized), time.min)
    return datetime.fromisoformat(normalized)
