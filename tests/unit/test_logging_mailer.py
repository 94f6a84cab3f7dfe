"""
Unit tests for LoggingReminderMailer.
"""

from datetime import datetime

import pytest

from kpi_tracker.core.exceptions import DispatchError
from kpi_tracker.infrastructure.local.logging_mailer import (
    LoggingReminderMailer,
    escalation_subject,
    reminder_subject,
)
from kpi_tracker.models.enums import ReminderKind
from kpi_tracker.models.user import User


class TestSubjects:
    def test_reminder_subjects(self):
        assert reminder_subject(ReminderKind.UPCOMING) == (
            "KPI-Erinnerung: Fällige Einträge in 3 Tagen"
        )
        assert reminder_subject(ReminderKind.DUE_TODAY) == (
            "KPI-Erinnerung: Einträge sind heute fällig"
        )
        assert reminder_subject(ReminderKind.OVERDUE, 14) == (
            "DRINGEND: KPI-Einträge sind seit 14 Tagen überfällig"
        )

    def test_escalation_subject(self):
        assert escalation_subject(21) == "ESKALATION: KPI-Einträge seit 21 Tagen überfällig"


@pytest.mark.asyncio
async def test_send_reminder_renders_kpis(policy, make_kpi, recorded_until_august, owner):
    kpi = make_kpi(periods=recorded_until_august, name="Umsatz")
    plan = policy.evaluate([kpi], {owner.id: owner}, [], datetime(2024, 10, 8, 7, 0))
    mailer = LoggingReminderMailer()

    await mailer.send_reminder(owner, ReminderKind.OVERDUE, plan.reminders, days_overdue=7)

    message = mailer.outbox[0]
    assert message.recipient == "owner@example.com"
    assert message.subject == "DRINGEND: KPI-Einträge sind seit 7 Tagen überfällig"
    assert "Umsatz: September 2024 (fällig am 01.10.2024)" in message.body


@pytest.mark.asyncio
async def test_send_escalation_names_owner(policy, make_kpi, recorded_until_august, owner, admin):
    kpi = make_kpi(periods=recorded_until_august)
    plan = policy.evaluate([kpi], {owner.id: owner}, [admin], datetime(2024, 10, 22, 7, 0))
    mailer = LoggingReminderMailer()

    await mailer.send_escalation(admin, owner, plan.escalations)

    message = mailer.outbox[0]
    assert message.recipient == "admin@example.com"
    assert message.subject.startswith("ESKALATION")
    assert "owner@example.com" in message.body


@pytest.mark.asyncio
async def test_send_test():
    mailer = LoggingReminderMailer()
    await mailer.send_test("ops@example.com")
    assert mailer.outbox[0].subject == "KPI-Tracker: Test-E-Mail"


@pytest.mark.asyncio
async def test_invalid_address_raises_dispatch_error():
    mailer = LoggingReminderMailer()
    with pytest.raises(DispatchError):
        await mailer.send_test("not-an-address")
    with pytest.raises(DispatchError):
        await mailer.send_reminder(User(id="x", email=""), ReminderKind.DUE_TODAY, [])
    assert mailer.outbox == []
