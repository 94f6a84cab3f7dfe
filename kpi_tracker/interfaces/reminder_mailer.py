"""
Reminder mailer interface.

Implementations render and deliver messages; they raise DispatchError when
delivery fails.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from kpi_tracker.models.enums import ReminderKind
from kpi_tracker.models.reminder import AdminEscalation, UserReminder
from kpi_tracker.models.user import User


class IReminderMailer(ABC):
    """Abstract interface for reminder delivery."""

    @abstractmethod
    async def send_reminder(
        self,
        user: User,
        kind: ReminderKind,
        reminders: list[UserReminder],
        days_overdue: int = 0,
    ) -> None:
        """Send one reminder message covering several KPIs of the same kind."""
        pass

    @abstractmethod
    async def send_escalation(
        self,
        admin: User,
        user: User,
        escalations: list[AdminEscalation],
    ) -> None:
        """Send an escalation about a user's overdue KPIs to one administrator."""
        pass

    @abstractmethod
    async def send_test(self, recipient: str) -> None:
        """Send a test message to an arbitrary address."""
        pass
