"""
Reminder and escalation policy.

Decides, for every KPI and one consistent "now", which reminder fires today:

    due date exactly N days ahead   -> UPCOMING   (owner)
    missed due date is today        -> DUE_TODAY  (owner)
    exactly 7 / 14 days overdue     -> OVERDUE    (owner)
    21 or more days overdue         -> OVERDUE + escalation to every admin

Triggers are exact-day, except escalation which repeats daily until the
value is recorded. Nothing is persisted; repeated sends are deduplicated
at dispatch via the decisions' idempotency keys.
"""

from datetime import datetime
from typing import Iterable, Mapping, Optional

from kpi_tracker.core.config import get_settings
from kpi_tracker.core.exceptions import NotFoundError
from kpi_tracker.core.logger import setup_logger
from kpi_tracker.models.enums import KpiStatus, ReminderKind, Urgency
from kpi_tracker.models.kpi import KPI
from kpi_tracker.models.reminder import (
    AdminEscalation,
    EscalationDecision,
    ReminderDecision,
    ReminderFailure,
    ReminderPlan,
    UserReminder,
)
from kpi_tracker.models.status import KpiEvaluation
from kpi_tracker.models.user import User
from kpi_tracker.services.kpi_status_service import KpiStatusService

logger = setup_logger(__name__)


class ReminderPolicy:
    """
    Service for reminder and escalation decisions.

    Pure: no I/O besides logging. Dispatch lives in ReminderService.
    """

    def __init__(
        self,
        status_service: Optional[KpiStatusService] = None,
        upcoming_days: Optional[int] = None,
        overdue_days: Optional[Iterable[int]] = None,
        escalation_days: Optional[int] = None,
    ):
        settings = get_settings()
        self.status_service = status_service or KpiStatusService()
        self.upcoming_days = (
            settings.UPCOMING_REMINDER_DAYS if upcoming_days is None else upcoming_days
        )
        self.overdue_days = sorted(
            settings.OVERDUE_REMINDER_DAYS if overdue_days is None else overdue_days
        )
        self.escalation_days = (
            settings.ESCALATION_DAYS if escalation_days is None else escalation_days
        )

    def decide(self, kpi: KPI, now: datetime) -> Optional[ReminderDecision]:
        """
        Reminder that fires for a KPI today, or None.

        Rules are checked top-down and the first match wins.
        """
        evaluation = self.status_service.evaluate(kpi, now)
        if evaluation.status is KpiStatus.GREEN:
            return None

        if evaluation.days_until_due == self.upcoming_days:
            return ReminderDecision(
                kind=ReminderKind.UPCOMING,
                kpi_id=kpi.id,
                period=evaluation.current_period,
                due_date=evaluation.next_due_date.date(),
                days_until_due=evaluation.days_until_due,
                urgency=Urgency.LOW,
            )

        if evaluation.missed_period is None:
            return None

        days_overdue = evaluation.days_overdue
        if days_overdue == 0:
            return self._overdue_decision(
                evaluation, ReminderKind.DUE_TODAY, 0, Urgency.MEDIUM
            )

        if days_overdue >= self.escalation_days:
            return self._overdue_decision(
                evaluation,
                ReminderKind.OVERDUE,
                self.escalation_days,
                Urgency.CRITICAL,
                escalate=True,
            )

        if days_overdue in self.overdue_days:
            urgency = Urgency.MEDIUM if days_overdue == self.overdue_days[0] else Urgency.HIGH
            return self._overdue_decision(
                evaluation, ReminderKind.OVERDUE, days_overdue, urgency
            )

        return None

    def _overdue_decision(
        self,
        evaluation: KpiEvaluation,
        kind: ReminderKind,
        days_overdue: int,
        urgency: Urgency,
        escalate: bool = False,
    ) -> ReminderDecision:
        return ReminderDecision(
            kind=kind,
            kpi_id=evaluation.kpi_id,
            period=evaluation.missed_period,
            due_date=evaluation.missed_due_date.date(),
            days_overdue=days_overdue,
            urgency=urgency,
            escalate=escalate,
        )

    def escalation_for(
        self, kpi: KPI, decision: ReminderDecision, admins: list[User]
    ) -> EscalationDecision:
        return EscalationDecision(
            kpi_id=kpi.id,
            user_id=kpi.user_id,
            admin_ids=tuple(admin.id for admin in admins),
            period=decision.period,
            due_date=decision.due_date,
            days_overdue=self.escalation_days,
        )

    def evaluate(
        self,
        kpis: Iterable[KPI],
        owners: Mapping[str, User],
        admins: list[User],
        now: datetime,
    ) -> ReminderPlan:
        """
        Apply the policy to a KPI population.

        A KPI that fails to evaluate is recorded as a failure and does not
        stop the others.

        Args:
            kpis: KPIs to check
            owners: Users by id, must contain every KPI owner
            admins: Escalation recipients
            now: Single evaluation instant for the whole pass

        Returns:
            ReminderPlan with user reminders, admin escalations and failures
        """
        plan = ReminderPlan(evaluated_at=now)
        missing_admins_logged = False

        for kpi in kpis:
            try:
                decision = self.decide(kpi, now)
                if decision is None:
                    continue

                owner = owners.get(kpi.user_id)
                if owner is None:
                    raise NotFoundError(
                        f"Owner {kpi.user_id} of KPI {kpi.id} not found",
                        details={"kpi_id": str(kpi.id), "user_id": kpi.user_id},
                    )
                plan.reminders.append(UserReminder(user=owner, kpi=kpi, decision=decision))

                if not decision.escalate:
                    continue
                if not admins:
                    if not missing_admins_logged:
                        logger.warning("No admins found for escalation")
                        missing_admins_logged = True
                    continue

                escalation = self.escalation_for(kpi, decision, admins)
                for admin in admins:
                    plan.escalations.append(
                        AdminEscalation(admin=admin, user=owner, kpi=kpi, escalation=escalation)
                    )
            except Exception as e:
                logger.error(f"Failed to evaluate reminders for KPI {kpi.id}: {e}", exc_info=True)
                plan.failures.append(
                    ReminderFailure(kpi_id=kpi.id, error=str(e), error_type=type(e).__name__)
                )

        logger.info(
            f"Reminder evaluation at {now.isoformat()}: "
            f"{len(plan.reminders)} reminders, {len(plan.escalations)} escalations, "
            f"{len(plan.failures)} failures"
        )
        return plan
