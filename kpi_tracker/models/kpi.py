"""
KPI models.

A KPI is an indicator with a reporting cadence; each recorded value is tagged
with the period it belongs to.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from kpi_tracker.models.decimal_value import DecimalValue
from kpi_tracker.models.enums import KpiInterval
from kpi_tracker.models.period import Period


class KPIValue(BaseModel):
    """A value recorded for one reporting period."""

    period: Period
    value: DecimalValue
    comment: Optional[str] = Field(None, max_length=2000)
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class KPI(BaseModel):
    """KPI definition with its recorded values."""

    id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    user_id: str = Field(..., description="Owning user")
    interval: Optional[KpiInterval] = Field(
        None, description="None when the stored cadence is missing or unknown"
    )
    target: Optional[DecimalValue] = None
    unit: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=2000)
    created_at: datetime
    values: list[KPIValue] = Field(default_factory=list)

    class Config:
        from_attributes = True

    def value_for_period(self, period: Period) -> Optional[KPIValue]:
        """Get the value recorded for a period, if any."""
        for value in self.values:
            if value.period == period:
                return value
        return None

    def has_value_for_period(self, period: Period) -> bool:
        return self.value_for_period(period) is not None
