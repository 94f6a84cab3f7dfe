"""
Reminder and escalation models.

Decisions are the ephemeral output of one evaluation pass; nothing here is
persisted. Dispatch-side deduplication can use ``idempotency_key``.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from kpi_tracker.models.enums import ReminderKind, Urgency
from kpi_tracker.models.kpi import KPI
from kpi_tracker.models.period import Period
from kpi_tracker.models.user import User


class ReminderDecision(BaseModel):
    """The reminder that fires for one KPI on one day."""

    model_config = ConfigDict(frozen=True)

    kind: ReminderKind
    kpi_id: UUID
    period: Period = Field(..., description="Period the reminder is about")
    due_date: date
    days_until_due: int = 0
    days_overdue: int = 0
    urgency: Urgency
    escalate: bool = False

    @property
    def idempotency_key(self) -> str:
        key = f"{self.kpi_id}:{self.period}:{self.kind.value}"
        if self.kind is ReminderKind.OVERDUE:
            key += f":{self.days_overdue}"
        return key


class EscalationDecision(BaseModel):
    """Escalation of a severely overdue KPI to all administrators."""

    model_config = ConfigDict(frozen=True)

    kpi_id: UUID
    user_id: str
    admin_ids: tuple[str, ...] = ()
    period: Period
    due_date: date
    days_overdue: int = 21

    @property
    def idempotency_key(self) -> str:
        return f"{self.kpi_id}:{self.period}:escalation"


class UserReminder(BaseModel):
    """A reminder addressed to the KPI's owner."""

    user: User
    kpi: KPI
    decision: ReminderDecision


class AdminEscalation(BaseModel):
    """An escalation addressed to one administrator."""

    admin: User
    user: User
    kpi: KPI
    escalation: EscalationDecision


class ReminderFailure(BaseModel):
    """A KPI whose evaluation raised instead of producing a decision."""

    kpi_id: Optional[UUID] = None
    error: str
    error_type: str


class ReminderPlan(BaseModel):
    """Everything one evaluation pass decided, ready for dispatch."""

    evaluated_at: datetime
    reminders: list[UserReminder] = Field(default_factory=list)
    escalations: list[AdminEscalation] = Field(default_factory=list)
    failures: list[ReminderFailure] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.reminders and not self.escalations

    def reminder_groups(self) -> list[tuple[User, ReminderKind, int, list[UserReminder]]]:
        """
        Group reminders into one message per user, kind and overdue day count.

        Returns:
            List of (user, kind, days_overdue, reminders) in first-seen order
        """
        groups: dict[tuple[str, ReminderKind, int], list[UserReminder]] = defaultdict(list)
        users: dict[str, User] = {}
        for reminder in self.reminders:
            key = (reminder.user.id, reminder.decision.kind, reminder.decision.days_overdue)
            groups[key].append(reminder)
            users[reminder.user.id] = reminder.user
        return [
            (users[user_id], kind, days, items)
            for (user_id, kind, days), items in groups.items()
        ]

    def escalation_groups(self) -> list[tuple[User, list[AdminEscalation]]]:
        """Group escalations by the overdue KPI owner."""
        groups: dict[str, list[AdminEscalation]] = defaultdict(list)
        users: dict[str, User] = {}
        for escalation in self.escalations:
            groups[escalation.user.id].append(escalation)
            users[escalation.user.id] = escalation.user
        return [(users[user_id], items) for user_id, items in groups.items()]


class ReminderRunStats(BaseModel):
    """Counters reported after a reminder run."""

    sent: int = 0
    failed: int = 0
    skipped: int = 0
    escalations: int = 0
    evaluation_failures: int = 0
    dry_run: bool = False
