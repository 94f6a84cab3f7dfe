"""
Reporting period value object.

A period is a canonical string naming one reporting window of a cadence:
    YYYY-MM   (monthly, e.g. 2024-09)
    YYYY-WNN  (weekly, ISO week, e.g. 2024-W36)
    YYYY-QN   (quarterly, e.g. 2024-Q3)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Optional

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from kpi_tracker.core.exceptions import InvalidPeriodFormat
from kpi_tracker.models.enums import KpiInterval

_WEEK_RE = re.compile(r"([0-9]{4})-W([0-9]{1,2})")
_QUARTER_RE = re.compile(r"([0-9]{4})-Q([0-9])")
_MONTH_RE = re.compile(r"([0-9]{4})-([0-9]{1,2})")

_FORMAT_HINT = "Verwenden Sie: YYYY-MM, YYYY-WXX oder YYYY-QX"

MONTH_NAMES = {
    1: "Januar",
    2: "Februar",
    3: "März",
    4: "April",
    5: "Mai",
    6: "Juni",
    7: "Juli",
    8: "August",
    9: "September",
    10: "Oktober",
    11: "November",
    12: "Dezember",
}


@dataclass(frozen=True)
class Period:
    """
    Validated, canonical reporting period.

    Construction validates pattern and bounds and normalizes month and week
    numbers to two digits, so "2024-9" and "2024-09" are the same period.
    Equality is canonical-string equality; periods of different cadences
    are never equal.
    """

    value: str
    interval: KpiInterval = field(init=False, repr=False, compare=False)
    year: int = field(init=False, repr=False, compare=False)
    number: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        interval, year, number = _parse(self.value)
        if year < 1:
            raise InvalidPeriodFormat(
                f"Ungültiges Zeitraum-Format. {_FORMAT_HINT}", details={"value": self.value}
            )
        object.__setattr__(self, "interval", interval)
        object.__setattr__(self, "year", year)
        object.__setattr__(self, "number", number)
        object.__setattr__(self, "value", _canonical(interval, year, number))

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, value: str) -> Period:
        return cls(value)

    @classmethod
    def from_parts(cls, interval: KpiInterval, year: int, number: int) -> Period:
        return cls(_canonical(interval, year, number))

    @classmethod
    def from_date(cls, day: date, interval: KpiInterval) -> Period:
        """Period of the given cadence that contains the given date."""
        if isinstance(day, datetime):
            day = day.date()

        if interval is KpiInterval.WEEKLY:
            iso_year, week, _ = day.isocalendar()
            return cls.from_parts(interval, iso_year, week)
        elif interval is KpiInterval.MONTHLY:
            return cls.from_parts(interval, day.year, day.month)
        elif interval is KpiInterval.QUARTERLY:
            return cls.from_parts(interval, day.year, (day.month - 1) // 3 + 1)

        raise ValueError(f"Unsupported interval: {interval!r}")

    @classmethod
    def current(cls, interval: KpiInterval, now: Optional[datetime] = None) -> Period:
        """Period containing ``now`` (the wall clock when omitted)."""
        return cls.from_date(now or datetime.now(), interval)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Validate from canonical strings and serialize back to them inside models."""
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda period: period.value
            ),
        )

    @classmethod
    def _coerce(cls, value: Any) -> Period:
        if isinstance(value, cls):
            return value
        return cls(value)

    def equals(self, other: Period) -> bool:
        return self.value == other.value

    def format(self) -> str:
        """German display form, e.g. "September 2024", "KW 5/2024", "Q1 2024"."""
        if self.interval is KpiInterval.MONTHLY:
            return f"{MONTH_NAMES[self.number]} {self.year}"
        if self.interval is KpiInterval.WEEKLY:
            return f"KW {self.number}/{self.year}"
        if self.interval is KpiInterval.QUARTERLY:
            return f"Q{self.number} {self.year}"
        return self.value

    def start_date(self) -> date:
        """First calendar day of the period."""
        if self.interval is KpiInterval.WEEKLY:
            first_monday = date.fromisocalendar(self.year, 1, 1)
            return first_monday + timedelta(weeks=self.number - 1)
        if self.interval is KpiInterval.MONTHLY:
            return date(self.year, self.number, 1)
        return date(self.year, (self.number - 1) * 3 + 1, 1)

    def end_date(self) -> date:
        """Last calendar day of the period."""
        return self.next().start_date() - timedelta(days=1)

    def next(self) -> Period:
        """The period directly following this one."""
        if self.interval is KpiInterval.WEEKLY:
            return Period.from_date(self.start_date() + timedelta(weeks=1), self.interval)
        size = 12 if self.interval is KpiInterval.MONTHLY else 4
        if self.number == size:
            return Period.from_parts(self.interval, self.year + 1, 1)
        return Period.from_parts(self.interval, self.year, self.number + 1)

    def previous(self) -> Period:
        """The period directly preceding this one."""
        if self.interval is KpiInterval.WEEKLY:
            return Period.from_date(self.start_date() - timedelta(weeks=1), self.interval)
        size = 12 if self.interval is KpiInterval.MONTHLY else 4
        if self.number == 1:
            return Period.from_parts(self.interval, self.year - 1, size)
        return Period.from_parts(self.interval, self.year, self.number - 1)


def _parse(raw: object) -> tuple[KpiInterval, int, int]:
    if not isinstance(raw, str) or not raw:
        raise InvalidPeriodFormat(
            f"Ungültiges Zeitraum-Format. {_FORMAT_HINT}", details={"value": raw}
        )

    match = _WEEK_RE.fullmatch(raw)
    if match:
        week = int(match.group(2))
        if not 1 <= week <= 53:
            raise InvalidPeriodFormat(
                "Ungültige Woche. Wochen müssen zwischen 01 und 53 liegen.",
                details={"value": raw},
            )
        year = int(match.group(1))
        if week == 53 and not _has_week_53(year):
            raise InvalidPeriodFormat(
                f"Ungültige Woche. Das Jahr {year} hat keine KW 53.",
                details={"value": raw},
            )
        return KpiInterval.WEEKLY, year, week

    match = _QUARTER_RE.fullmatch(raw)
    if match:
        quarter = int(match.group(2))
        if not 1 <= quarter <= 4:
            raise InvalidPeriodFormat(
                "Ungültiges Quartal. Quartale müssen zwischen 1 und 4 liegen.",
                details={"value": raw},
            )
        return KpiInterval.QUARTERLY, int(match.group(1)), quarter

    match = _MONTH_RE.fullmatch(raw)
    if match:
        month = int(match.group(2))
        if not 1 <= month <= 12:
            raise InvalidPeriodFormat(
                "Ungültiger Monat. Monate müssen zwischen 01 und 12 liegen.",
                details={"value": raw},
            )
        return KpiInterval.MONTHLY, int(match.group(1)), month

    raise InvalidPeriodFormat(
        f"Ungültiges Zeitraum-Format. {_FORMAT_HINT}", details={"value": raw}
    )


def _has_week_53(year: int) -> bool:
    try:
        date.fromisocalendar(year, 53, 1)
    except ValueError:
        return False
    return True


def _canonical(interval: KpiInterval, year: int, number: int) -> str:
    if interval is KpiInterval.WEEKLY:
        return f"{year:04d}-W{number:02d}"
    if interval is KpiInterval.QUARTERLY:
        return f"{year:04d}-Q{number}"
    return f"{year:04d}-{number:02d}"
