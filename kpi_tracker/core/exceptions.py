"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class KpiTrackerError(Exception):
    """Base exception for kpi_tracker."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(KpiTrackerError):
    """Resource not found."""

    pass


class ValidationError(KpiTrackerError):
    """Validation error."""

    pass


class InvalidPeriodFormat(ValidationError, ValueError):
    """Period string does not match a known format or is out of range."""

    pass


class InvalidDecimalFormat(ValidationError, ValueError):
    """Decimal input is not numeric."""

    pass


class UnknownInterval(ValidationError, ValueError):
    """KPI interval is missing or not one of the supported cadences."""

    pass


class InfrastructureError(KpiTrackerError):
    """Infrastructure-related error (data files, external services, etc.)."""

    pass


class DispatchError(InfrastructureError):
    """Sending a reminder or escalation failed."""

    pass
