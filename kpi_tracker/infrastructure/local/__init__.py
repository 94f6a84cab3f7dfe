"""Local (file based) implementations."""

from kpi_tracker.infrastructure.local.json_store import (
    JsonDataStore,
    JsonKpiRepository,
    JsonUserRepository,
)
from kpi_tracker.infrastructure.local.logging_mailer import LoggingReminderMailer

__all__ = [
    "JsonDataStore",
    "JsonKpiRepository",
    "JsonUserRepository",
    "LoggingReminderMailer",
]
