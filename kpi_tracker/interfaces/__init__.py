"""Abstract interfaces for infrastructure abstraction."""

from kpi_tracker.interfaces.clock import IClock
from kpi_tracker.interfaces.kpi_repository import IKpiRepository
from kpi_tracker.interfaces.reminder_mailer import IReminderMailer
from kpi_tracker.interfaces.user_repository import IUserRepository

__all__ = [
    "IClock",
    "IKpiRepository",
    "IReminderMailer",
    "IUserRepository",
]
