"""
Enum definitions for the application.

These enums are used across models and provide type-safe cadence/status values.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from kpi_tracker.core.exceptions import UnknownInterval


class KpiInterval(str, Enum):
    """Reporting cadence of a KPI."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"

    @classmethod
    def from_string(cls, value: str) -> KpiInterval:
        """Parse a stored interval, raising UnknownInterval for anything else."""
        interval = cls.try_parse(value)
        if interval is None:
            raise UnknownInterval(
                f'Ungültiges KPI-Intervall "{value}"', details={"value": value}
            )
        return interval

    @classmethod
    def try_parse(cls, value: object) -> Optional[KpiInterval]:
        """Parse a stored interval, returning None when it is missing or unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @property
    def label(self) -> str:
        """Human readable label."""
        return _INTERVAL_LABELS[self]

    @property
    def period_pattern(self) -> str:
        """Canonical period layout produced for this cadence."""
        return _INTERVAL_PATTERNS[self]


_INTERVAL_LABELS = {
    KpiInterval.WEEKLY: "Wöchentlich",
    KpiInterval.MONTHLY: "Monatlich",
    KpiInterval.QUARTERLY: "Quartalsweise",
}

_INTERVAL_PATTERNS = {
    KpiInterval.WEEKLY: "YYYY-WNN",
    KpiInterval.MONTHLY: "YYYY-MM",
    KpiInterval.QUARTERLY: "YYYY-QN",
}


class KpiStatus(str, Enum):
    """
    Traffic-light status of a KPI for the current period.

    GREEN = value recorded for the current period
    YELLOW = not recorded, due within the warning threshold
    RED = not recorded, outside the warning window
    """

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"

    @property
    def priority(self) -> int:
        """Higher is more critical."""
        return _STATUS_PRIORITIES[self]

    def is_worse_than(self, other: KpiStatus) -> bool:
        return self.priority > other.priority

    def is_better_than(self, other: KpiStatus) -> bool:
        return self.priority < other.priority

    @property
    def is_critical(self) -> bool:
        return self is not KpiStatus.GREEN

    @property
    def description(self) -> str:
        return _STATUS_DESCRIPTIONS[self]

    @property
    def icon(self) -> str:
        return _STATUS_ICONS[self]

    @property
    def css_class(self) -> str:
        return f"status-{self.value}"

    @classmethod
    def aggregate(cls, statuses: Iterable[KpiStatus]) -> KpiStatus:
        """Worst status wins; an empty collection is GREEN."""
        worst = cls.GREEN
        for status in statuses:
            if status.is_worse_than(worst):
                worst = status
        return worst


_STATUS_PRIORITIES = {
    KpiStatus.GREEN: 1,
    KpiStatus.YELLOW: 2,
    KpiStatus.RED: 3,
}

_STATUS_DESCRIPTIONS = {
    KpiStatus.GREEN: "Alle Werte erfasst",
    KpiStatus.YELLOW: "Bald fällig",
    KpiStatus.RED: "Überfällig",
}

_STATUS_ICONS = {
    KpiStatus.GREEN: "✅",
    KpiStatus.YELLOW: "⚠️",
    KpiStatus.RED: "❌",
}


class ReminderKind(str, Enum):
    """Which reminder fires for a KPI on a given day."""

    UPCOMING = "upcoming"
    DUE_TODAY = "due_today"
    OVERDUE = "overdue"


class Urgency(str, Enum):
    """Urgency attached to a reminder."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
