"""
Status snapshot models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from kpi_tracker.models.enums import KpiInterval, KpiStatus
from kpi_tracker.models.period import Period


class StatusTransition(BaseModel):
    """Status observed for the same KPI at two evaluation instants."""

    model_config = ConfigDict(frozen=True)

    previous: KpiStatus
    current: KpiStatus

    @property
    def changed(self) -> bool:
        return self.previous is not self.current

    @property
    def became_overdue(self) -> bool:
        return self.current is KpiStatus.RED and self.previous is not KpiStatus.RED

    @property
    def recovered(self) -> bool:
        return self.current is KpiStatus.GREEN and self.previous is not KpiStatus.GREEN


class StatusSummary(BaseModel):
    """Aggregated status over a set of KPIs (dashboard overview)."""

    overall_status: KpiStatus = KpiStatus.GREEN
    total_kpis: int = 0
    green_count: int = 0
    yellow_count: int = 0
    red_count: int = 0

    @property
    def green_percentage(self) -> float:
        if self.total_kpis == 0:
            return 0.0
        return round(self.green_count / self.total_kpis * 100, 1)

    @property
    def critical_percentage(self) -> float:
        if self.total_kpis == 0:
            return 0.0
        return round((self.yellow_count + self.red_count) / self.total_kpis * 100, 1)


class KpiEvaluation(BaseModel):
    """
    Everything derived for one KPI at one instant.

    ``missed_period`` is the oldest period in the unbroken run of unrecorded
    periods right before the current one; None when the previous period
    has a value (or did not exist yet for this KPI).
    """

    model_config = ConfigDict(frozen=True)

    kpi_id: UUID
    interval: KpiInterval
    evaluated_at: datetime
    current_period: Period
    next_due_date: datetime
    status: KpiStatus
    missed_period: Optional[Period] = None
    missed_due_date: Optional[datetime] = None

    @property
    def days_until_due(self) -> int:
        return (self.next_due_date.date() - self.evaluated_at.date()).days

    @property
    def days_overdue(self) -> int:
        if self.missed_due_date is None:
            return 0
        return max(0, (self.evaluated_at.date() - self.missed_due_date.date()).days)
