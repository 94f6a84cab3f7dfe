"""
Domain events derived from status evaluations.

Events are not stored; they are inferred by evaluating a KPI's status at two
instants and comparing the results.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from kpi_tracker.models.enums import KpiStatus, Urgency


class KpiBecameOverdue(BaseModel):
    """A KPI switched to RED between two evaluations."""

    model_config = ConfigDict(frozen=True)

    kpi_id: UUID
    kpi_name: str
    user_id: str
    previous_status: KpiStatus
    current_status: KpiStatus
    days_overdue: int = Field(..., ge=0)
    due_date: date
    occurred_on: datetime
    context: dict[str, Any] = Field(default_factory=dict)

    @property
    def event_type(self) -> str:
        return "kpi.became.overdue"

    @property
    def event_id(self) -> str:
        return f"kpi_became_overdue_{self.kpi_id}_{self.occurred_on:%Y%m%d%H%M%S}"

    @property
    def is_first_time_overdue(self) -> bool:
        return self.previous_status is not KpiStatus.RED

    @property
    def escalation_level(self) -> int:
        """1 (slightly overdue) .. 5 (more than two weeks overdue)."""
        if self.days_overdue <= 1:
            return 1
        if self.days_overdue <= 3:
            return 2
        if self.days_overdue <= 7:
            return 3
        if self.days_overdue <= 14:
            return 4
        return 5

    @property
    def urgency(self) -> Urgency:
        level = self.escalation_level
        if level <= 2:
            return Urgency.MEDIUM
        if level <= 4:
            return Urgency.HIGH
        return Urgency.CRITICAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "occurred_on": self.occurred_on.isoformat(),
            "kpi_id": str(self.kpi_id),
            "kpi_name": self.kpi_name,
            "user_id": self.user_id,
            "previous_status": self.previous_status.value,
            "current_status": self.current_status.value,
            "days_overdue": self.days_overdue,
            "due_date": self.due_date.isoformat(),
            "escalation_level": self.escalation_level,
            "urgency": self.urgency.value,
            "is_first_time_overdue": self.is_first_time_overdue,
            "context": self.context,
        }
