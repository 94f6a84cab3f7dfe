"""
Shared fixtures for unit tests.
"""

from datetime import datetime
from uuid import uuid4

import pytest

from kpi_tracker.models.enums import KpiInterval
from kpi_tracker.models.kpi import KPI, KPIValue
from kpi_tracker.models.user import User
from kpi_tracker.services.kpi_status_service import KpiStatusService
from kpi_tracker.services.reminder_policy import ReminderPolicy


@pytest.fixture
def make_kpi():
    """Factory for KPIs with values recorded for the given periods."""

    def _make(
        interval=KpiInterval.MONTHLY,
        periods=(),
        user_id="owner",
        created_at=datetime(2024, 1, 1),
        name="Umsatz",
    ) -> KPI:
        return KPI(
            id=uuid4(),
            name=name,
            user_id=user_id,
            interval=interval,
            created_at=created_at,
            values=[KPIValue(period=period, value="10") for period in periods],
        )

    return _make


@pytest.fixture
def owner() -> User:
    return User(id="owner", email="owner@example.com", display_name="Olga Owner")


@pytest.fixture
def admin() -> User:
    return User(id="admin", email="admin@example.com", display_name="Ada Admin", is_admin=True)


@pytest.fixture
def status_service() -> KpiStatusService:
    return KpiStatusService(
        warning_days=3,
        fallback_interval=KpiInterval.WEEKLY,
        max_lookback_periods=104,
    )


@pytest.fixture
def policy(status_service) -> ReminderPolicy:
    return ReminderPolicy(
        status_service=status_service,
        upcoming_days=3,
        overdue_days=[7, 14],
        escalation_days=21,
    )


# Monthly values recorded January through August 2024; September is missing
# and therefore due on 2024-10-01.
RECORDED_UNTIL_AUGUST = [f"2024-{month:02d}" for month in range(1, 9)]


@pytest.fixture
def recorded_until_august() -> list[str]:
    return list(RECORDED_UNTIL_AUGUST)
