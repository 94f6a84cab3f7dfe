"""Domain models and value objects."""

from kpi_tracker.models.decimal_value import DecimalValue
from kpi_tracker.models.enums import KpiInterval, KpiStatus, ReminderKind, Urgency
from kpi_tracker.models.kpi import KPI, KPIValue
from kpi_tracker.models.period import Period
from kpi_tracker.models.user import User

__all__ = [
    "DecimalValue",
    "KpiInterval",
    "KpiStatus",
    "ReminderKind",
    "Urgency",
    "KPI",
    "KPIValue",
    "Period",
    "User",
]
