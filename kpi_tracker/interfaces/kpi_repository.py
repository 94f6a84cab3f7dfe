"""
KPI repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from kpi_tracker.models.kpi import KPI
from kpi_tracker.models.period import Period


class IKpiRepository(ABC):
    """Abstract interface for KPI persistence."""

    @abstractmethod
    async def get(self, kpi_id: UUID) -> Optional[KPI]:
        """Get a KPI (with its recorded values) by ID."""
        pass

    @abstractmethod
    async def list_for_reminder(self) -> list[KPI]:
        """List every KPI that takes part in the reminder run, values loaded."""
        pass

    @abstractmethod
    async def has_value_for_period(self, kpi_id: UUID, period: Period) -> bool:
        """Check whether a value is recorded for the KPI and period."""
        pass
