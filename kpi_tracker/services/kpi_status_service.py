"""
KPI status and due-date engine.

Derives the current period, the next due date and the GREEN/YELLOW/RED
status of a KPI from its cadence, its recorded values and an explicit "now".
Every method is pure; callers read the clock once per pass and pass it in.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from kpi_tracker.core.config import get_settings
from kpi_tracker.core.logger import setup_logger
from kpi_tracker.models.enums import KpiInterval, KpiStatus
from kpi_tracker.models.events import KpiBecameOverdue
from kpi_tracker.models.kpi import KPI
from kpi_tracker.models.period import Period
from kpi_tracker.models.status import KpiEvaluation, StatusSummary, StatusTransition
from kpi_tracker.utils.datetime_utils import start_of_day

logger = setup_logger(__name__)


class KpiStatusService:
    """Service for status and due-date calculations."""

    def __init__(
        self,
        warning_days: Optional[int] = None,
        fallback_interval: Optional[KpiInterval] = None,
        max_lookback_periods: Optional[int] = None,
    ):
        settings = get_settings()
        self.warning_days = (
            settings.WARNING_THRESHOLD_DAYS if warning_days is None else warning_days
        )
        self.fallback_interval = fallback_interval or KpiInterval(settings.FALLBACK_INTERVAL)
        self.max_lookback_periods = (
            max_lookback_periods or settings.MAX_OVERDUE_LOOKBACK_PERIODS
        )

    # ------------------------------------------------------------------
    # Cadence arithmetic
    # ------------------------------------------------------------------

    @staticmethod
    def next_due_date(interval: KpiInterval, now: datetime) -> datetime:
        """
        Next due date strictly after ``now``, at midnight.

        WEEKLY: next Monday (a Monday advances to the following Monday)
        MONTHLY: first day of the following month
        QUARTERLY: first day of the following quarter
        """
        today = now.date()

        if interval is KpiInterval.WEEKLY:
            due = today + timedelta(days=7 - today.weekday())
        elif interval is KpiInterval.MONTHLY:
            if today.month == 12:
                due = date(today.year + 1, 1, 1)
            else:
                due = date(today.year, today.month + 1, 1)
        elif interval is KpiInterval.QUARTERLY:
            if today.month >= 10:
                due = date(today.year + 1, 1, 1)
            else:
                next_quarter_month = ((today.month - 1) // 3 + 1) * 3 + 1
                due = date(today.year, next_quarter_month, 1)
        else:
            raise ValueError(f"Unsupported interval: {interval!r}")

        return _at_midnight(due, now)

    @staticmethod
    def current_period(interval: KpiInterval, now: datetime) -> Period:
        return Period.from_date(now, interval)

    @staticmethod
    def period_start(period: Period, tz_reference: Optional[datetime] = None) -> datetime:
        return _at_midnight(period.start_date(), tz_reference)

    @staticmethod
    def period_due_date(period: Period, tz_reference: Optional[datetime] = None) -> datetime:
        """A period's value is due when the following period starts."""
        return _at_midnight(period.next().start_date(), tz_reference)

    @staticmethod
    def previous_period(period: Period) -> Period:
        return period.previous()

    # ------------------------------------------------------------------
    # Per-KPI evaluation
    # ------------------------------------------------------------------

    def resolve_interval(self, kpi: KPI) -> KpiInterval:
        """
        Get the KPI's cadence, falling back to the configured default.

        A missing interval means corrupted upstream data, so it is logged.
        """
        if kpi.interval is not None:
            return kpi.interval
        logger.warning(
            f"KPI {kpi.id} has no valid interval, "
            f"falling back to {self.fallback_interval.value}"
        )
        return self.fallback_interval

    def evaluate(self, kpi: KPI, now: datetime) -> KpiEvaluation:
        """Derive period, due date, status and missed deadline for one KPI."""
        interval = self.resolve_interval(kpi)
        current = self.current_period(interval, now)
        next_due = self.next_due_date(interval, now)
        status = self._status_for(kpi, current, next_due, now)
        missed = self._first_missed_period(kpi, current)

        return KpiEvaluation(
            kpi_id=kpi.id,
            interval=interval,
            evaluated_at=now,
            current_period=current,
            next_due_date=next_due,
            status=status,
            missed_period=missed,
            missed_due_date=self.period_due_date(missed, now) if missed else None,
        )

    def status(self, kpi: KPI, now: datetime) -> KpiStatus:
        interval = self.resolve_interval(kpi)
        current = self.current_period(interval, now)
        return self._status_for(kpi, current, self.next_due_date(interval, now), now)

    def days_until_due(self, kpi: KPI, now: datetime) -> int:
        """Whole calendar days until the next due date."""
        due = self.next_due_date(self.resolve_interval(kpi), now)
        return (due.date() - now.date()).days

    def first_missed_period(self, kpi: KPI, now: datetime) -> Optional[Period]:
        current = self.current_period(self.resolve_interval(kpi), now)
        return self._first_missed_period(kpi, current)

    def overdue_since(self, kpi: KPI, now: datetime) -> Optional[datetime]:
        """Due date of the oldest unmet period, None when nothing is overdue."""
        missed = self.first_missed_period(kpi, now)
        if missed is None:
            return None
        return self.period_due_date(missed, now)

    def _status_for(
        self, kpi: KPI, current: Period, next_due: datetime, now: datetime
    ) -> KpiStatus:
        if kpi.has_value_for_period(current):
            return KpiStatus.GREEN
        if (next_due - now).days <= self.warning_days:
            return KpiStatus.YELLOW
        return KpiStatus.RED

    def _first_missed_period(self, kpi: KPI, current: Period) -> Optional[Period]:
        """
        Walk back from the previous period while no value is recorded.

        Periods whose deadline passed before the KPI existed are not expected.
        """
        created_on = kpi.created_at.date()
        candidate = current.previous()
        oldest: Optional[Period] = None

        for _ in range(self.max_lookback_periods):
            if candidate.next().start_date() <= created_on:
                break
            if kpi.has_value_for_period(candidate):
                break
            oldest = candidate
            candidate = candidate.previous()

        return oldest

    # ------------------------------------------------------------------
    # Population views
    # ------------------------------------------------------------------

    def summarize(self, kpis: Iterable[KPI], now: datetime) -> StatusSummary:
        """Aggregate statuses for a dashboard overview."""
        counts = {KpiStatus.GREEN: 0, KpiStatus.YELLOW: 0, KpiStatus.RED: 0}
        for kpi in kpis:
            counts[self.status(kpi, now)] += 1

        return StatusSummary(
            overall_status=KpiStatus.aggregate(s for s, n in counts.items() if n),
            total_kpis=sum(counts.values()),
            green_count=counts[KpiStatus.GREEN],
            yellow_count=counts[KpiStatus.YELLOW],
            red_count=counts[KpiStatus.RED],
        )

    def transition(self, kpi: KPI, earlier: datetime, later: datetime) -> StatusTransition:
        return StatusTransition(
            previous=self.status(kpi, earlier),
            current=self.status(kpi, later),
        )

    def detect_overdue_events(
        self, kpis: Iterable[KPI], earlier: datetime, later: datetime
    ) -> list[KpiBecameOverdue]:
        """Events for every KPI that switched to RED between two instants."""
        events: list[KpiBecameOverdue] = []
        for kpi in kpis:
            try:
                change = self.transition(kpi, earlier, later)
                if not change.became_overdue:
                    continue

                evaluation = self.evaluate(kpi, later)
                events.append(
                    KpiBecameOverdue(
                        kpi_id=kpi.id,
                        kpi_name=kpi.name,
                        user_id=kpi.user_id,
                        previous_status=change.previous,
                        current_status=change.current,
                        days_overdue=evaluation.days_overdue,
                        due_date=(evaluation.missed_due_date or evaluation.next_due_date).date(),
                        occurred_on=later,
                    )
                )
            except Exception as e:
                logger.error(
                    f"Failed to detect status change for KPI {kpi.id}: {e}", exc_info=True
                )
        return events


def _at_midnight(day: date, tz_reference: Optional[datetime] = None) -> datetime:
    """Midnight of ``day`` in the same timezone (or naivety) as the reference."""
    if tz_reference is None:
        return start_of_day(day)
    return datetime.combine(day, time.min, tzinfo=tz_reference.tzinfo)
