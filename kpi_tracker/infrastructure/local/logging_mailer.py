"""
Logging implementation of the reminder mailer.

Renders a plain-text message per reminder group and writes it to the log
instead of delivering it. Used for local development and dry setups.
"""

from dataclasses import dataclass, field

from kpi_tracker.core.exceptions import DispatchError
from kpi_tracker.core.logger import setup_logger
from kpi_tracker.interfaces.reminder_mailer import IReminderMailer
from kpi_tracker.models.enums import ReminderKind
from kpi_tracker.models.reminder import AdminEscalation, UserReminder
from kpi_tracker.models.user import User

logger = setup_logger(__name__)

TEST_SUBJECT = "KPI-Tracker: Test-E-Mail"


def reminder_subject(kind: ReminderKind, days_overdue: int = 0, upcoming_days: int = 3) -> str:
    """Subject line for a reminder of the given kind."""
    if kind is ReminderKind.UPCOMING:
        return f"KPI-Erinnerung: Fällige Einträge in {upcoming_days} Tagen"
    if kind is ReminderKind.DUE_TODAY:
        return "KPI-Erinnerung: Einträge sind heute fällig"
    return f"DRINGEND: KPI-Einträge sind seit {days_overdue} Tagen überfällig"


def escalation_subject(days_overdue: int) -> str:
    return f"ESKALATION: KPI-Einträge seit {days_overdue} Tagen überfällig"


@dataclass
class RenderedMessage:
    recipient: str
    subject: str
    lines: list[str] = field(default_factory=list)

    @property
    def body(self) -> str:
        return "\n".join(self.lines)


class LoggingReminderMailer(IReminderMailer):
    """Mailer that logs rendered messages and keeps them in ``outbox``."""

    def __init__(self):
        self.outbox: list[RenderedMessage] = []

    async def send_reminder(
        self,
        user: User,
        kind: ReminderKind,
        reminders: list[UserReminder],
        days_overdue: int = 0,
    ) -> None:
        upcoming_days = reminders[0].decision.days_until_due if reminders else 3
        message = RenderedMessage(
            recipient=self._address(user),
            subject=reminder_subject(kind, days_overdue, upcoming_days),
            lines=[f"Hallo {user.name},", ""],
        )
        for reminder in reminders:
            decision = reminder.decision
            message.lines.append(
                f"- {reminder.kpi.name}: {decision.period.format()} "
                f"(fällig am {decision.due_date:%d.%m.%Y})"
            )
        self._deliver(message)

    async def send_escalation(
        self,
        admin: User,
        user: User,
        escalations: list[AdminEscalation],
    ) -> None:
        days = escalations[0].escalation.days_overdue if escalations else 21
        message = RenderedMessage(
            recipient=self._address(admin),
            subject=escalation_subject(days),
            lines=[f"Hallo {admin.name},", "", f"Überfällige KPIs von {user.name} ({user.email}):"],
        )
        for item in escalations:
            message.lines.append(
                f"- {item.kpi.name}: {item.escalation.period.format()} "
                f"(fällig am {item.escalation.due_date:%d.%m.%Y})"
            )
        self._deliver(message)

    async def send_test(self, recipient: str) -> None:
        message = RenderedMessage(
            recipient=self._check(recipient),
            subject=TEST_SUBJECT,
            lines=["Diese Test-E-Mail bestätigt, dass der Versand funktioniert."],
        )
        self._deliver(message)

    def _address(self, user: User) -> str:
        return self._check(user.email)

    @staticmethod
    def _check(address: str) -> str:
        if not address or "@" not in address:
            raise DispatchError(
                f"Invalid recipient address: {address!r}", details={"recipient": address}
            )
        return address

    def _deliver(self, message: RenderedMessage) -> None:
        self.outbox.append(message)
        logger.info(f"Mail to {message.recipient}: {message.subject}\n{message.body}")
