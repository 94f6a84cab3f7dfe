"""
Reminder run service.

Loads KPIs and recipients, evaluates the reminder policy once and hands the
result to the mailer. One message goes out per user and reminder kind (and
overdue day count); escalations go to every administrator.
Right before dispatch every KPI is checked once more, so a value recorded
after planning suppresses its reminder.
"""

from collections import defaultdict
from datetime import datetime
from typing import Optional
from uuid import UUID

from kpi_tracker.core.exceptions import NotFoundError
from kpi_tracker.core.logger import setup_logger
from kpi_tracker.interfaces.clock import IClock
from kpi_tracker.interfaces.kpi_repository import IKpiRepository
from kpi_tracker.interfaces.reminder_mailer import IReminderMailer
from kpi_tracker.interfaces.user_repository import IUserRepository
from kpi_tracker.models.reminder import (
    AdminEscalation,
    ReminderDecision,
    ReminderPlan,
    ReminderRunStats,
    UserReminder,
)
from kpi_tracker.models.user import User
from kpi_tracker.services.reminder_policy import ReminderPolicy
from kpi_tracker.utils.datetime_utils import SystemClock

logger = setup_logger(__name__)


class ReminderService:
    """
    Service for sending KPI reminders and escalations.

    Handles:
    - Planning a run without side effects (dry run)
    - Grouped delivery to KPI owners
    - Escalation of severely overdue KPIs to administrators
    - Test messages that bypass the policy
    """

    def __init__(
        self,
        kpi_repo: IKpiRepository,
        user_repo: IUserRepository,
        mailer: IReminderMailer,
        clock: Optional[IClock] = None,
        policy: Optional[ReminderPolicy] = None,
    ):
        self.kpi_repo = kpi_repo
        self.user_repo = user_repo
        self.mailer = mailer
        self.clock = clock or SystemClock()
        self.policy = policy or ReminderPolicy()

    async def plan_reminders(self, now: Optional[datetime] = None) -> ReminderPlan:
        """
        Evaluate every KPI once and return what would be sent.

        Args:
            now: Evaluation instant (read from the clock when omitted)

        Returns:
            ReminderPlan for this run
        """
        now = now or self.clock.now()
        kpis = await self.kpi_repo.list_for_reminder()
        users = await self.user_repo.list_all()
        admins = await self.user_repo.list_admins()

        owners = {user.id: user for user in users}
        for admin in admins:
            owners.setdefault(admin.id, admin)

        logger.debug(f"Evaluating {len(kpis)} KPIs for reminders at {now.isoformat()}")
        return self.policy.evaluate(kpis, owners, admins, now)

    async def decide_for_kpi(
        self, kpi_id: UUID, now: Optional[datetime] = None
    ) -> Optional[ReminderDecision]:
        """
        Evaluate the reminder policy for a single KPI.

        Raises:
            NotFoundError: If the KPI does not exist
        """
        kpi = await self.kpi_repo.get(kpi_id)
        if not kpi:
            raise NotFoundError(f"KPI {kpi_id} not found")
        return self.policy.decide(kpi, now or self.clock.now())

    async def send_due_reminders(
        self, dry_run: bool = False, now: Optional[datetime] = None
    ) -> ReminderRunStats:
        """
        Run the daily reminder pass.

        Args:
            dry_run: Only count the messages that would be sent
            now: Evaluation instant (read from the clock when omitted)

        Returns:
            ReminderRunStats with sent/failed/skipped/escalation counters
        """
        plan = await self.plan_reminders(now)
        stats = ReminderRunStats(
            dry_run=dry_run, evaluation_failures=len(plan.failures)
        )

        for user, kind, days_overdue, reminders in plan.reminder_groups():
            if dry_run:
                logger.info(
                    f"[dry-run] Would send {kind.value} reminder to {user.email} "
                    f"for {len(reminders)} KPI(s)"
                )
                stats.skipped += 1
                continue
            try:
                reminders = await self._still_missing(reminders)
                if not reminders:
                    stats.skipped += 1
                    continue
                await self.mailer.send_reminder(user, kind, reminders, days_overdue=days_overdue)
                stats.sent += 1
                logger.info(
                    f"Sent {kind.value} reminder to {user.email} for {len(reminders)} KPI(s)"
                )
            except Exception as e:
                stats.failed += 1
                logger.error(f"Failed to send {kind.value} reminder to {user.email}: {e}")

        for owner, items in plan.escalation_groups():
            for admin, escalations in _by_admin(items):
                if dry_run:
                    logger.info(
                        f"[dry-run] Would escalate {len(escalations)} KPI(s) of "
                        f"{owner.email} to {admin.email}"
                    )
                    stats.skipped += 1
                    continue
                try:
                    escalations = await self._still_missing(escalations)
                    if not escalations:
                        stats.skipped += 1
                        continue
                    await self.mailer.send_escalation(admin, owner, escalations)
                    stats.escalations += 1
                    logger.warning(
                        f"Escalated {len(escalations)} overdue KPI(s) of {owner.email} "
                        f"to {admin.email}"
                    )
                except Exception as e:
                    stats.failed += 1
                    logger.error(f"Failed to send escalation to {admin.email}: {e}")

        logger.info(
            f"Reminder run finished: sent={stats.sent}, failed={stats.failed}, "
            f"skipped={stats.skipped}, escalations={stats.escalations}, "
            f"evaluation_failures={stats.evaluation_failures}"
        )
        return stats

    async def _still_missing(self, items: list) -> list:
        """Drop reminders whose period got a value after the run was planned."""
        remaining = []
        for item in items:
            period = (
                item.decision.period if isinstance(item, UserReminder) else item.escalation.period
            )
            if await self.kpi_repo.has_value_for_period(item.kpi.id, period):
                logger.info(f"Value for KPI {item.kpi.id} ({period}) recorded meanwhile, skipping")
                continue
            remaining.append(item)
        return remaining

    async def send_test_email(self, recipient: str) -> bool:
        """
        Send a test message, bypassing the reminder policy.

        Returns:
            True if the mailer accepted the message
        """
        try:
            await self.mailer.send_test(recipient)
        except Exception as e:
            logger.error(f"Test e-mail to {recipient} failed: {e}")
            return False
        logger.info(f"Test e-mail sent to {recipient}")
        return True


def _by_admin(items: list[AdminEscalation]) -> list[tuple[User, list[AdminEscalation]]]:
    groups: dict[str, list[AdminEscalation]] = defaultdict(list)
    admins: dict[str, User] = {}
    for item in items:
        groups[item.admin.id].append(item)
        admins[item.admin.id] = item.admin
    return [(admins[admin_id], escalations) for admin_id, escalations in groups.items()]
