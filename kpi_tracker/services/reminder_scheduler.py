"""
Daily scheduler for the reminder run.

Uses APScheduler for in-process scheduling. Between two runs it also logs
every KPI that turned overdue.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from kpi_tracker.core.config import get_settings
from kpi_tracker.core.logger import logger
from kpi_tracker.models.reminder import ReminderRunStats
from kpi_tracker.services.kpi_status_service import KpiStatusService
from kpi_tracker.services.reminder_service import ReminderService

JOB_ID = "daily_kpi_reminders"


class ReminderScheduler:
    """
    Background scheduler for the daily reminder run.

    The run must happen at least once per calendar day, otherwise exact-day
    reminders for that day are lost.
    """

    def __init__(
        self,
        reminder_service: ReminderService,
        status_service: Optional[KpiStatusService] = None,
    ):
        self._reminder_service = reminder_service
        self._status_service = status_service or reminder_service.policy.status_service
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._last_run: Optional[datetime] = None

    @property
    def last_run(self) -> Optional[datetime]:
        return self._last_run

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def start(self):
        """Start the scheduler."""
        settings = get_settings()

        # Only run scheduler in non-test environments
        if settings.is_test:
            logger.info("Reminder scheduler disabled in test environment")
            return

        timezone = settings.TIMEZONE or None
        self._scheduler = AsyncIOScheduler(timezone=timezone) if timezone else AsyncIOScheduler()
        self._scheduler.add_job(
            self._run_daily_reminders,
            CronTrigger(hour=settings.REMINDER_CRON_HOUR, minute=settings.REMINDER_CRON_MINUTE),
            id=JOB_ID,
            name="Daily KPI Reminders",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(
            "Reminder scheduler started: daily at "
            f"{settings.REMINDER_CRON_HOUR:02d}:{settings.REMINDER_CRON_MINUTE:02d}"
        )

    async def stop(self):
        """Stop the scheduler."""
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Reminder scheduler stopped")

    async def _run_daily_reminders(self):
        """Job wrapper with error handling."""
        try:
            await self.run_once()
        except Exception as e:
            logger.error(f"Daily KPI reminder run failed: {e}", exc_info=True)

    async def run_once(self, now: Optional[datetime] = None) -> ReminderRunStats:
        """
        Execute one reminder run at ``now`` (the service clock when omitted).
        """
        now = now or self._reminder_service.clock.now()

        stats = await self._reminder_service.send_due_reminders(now=now)

        if self._last_run is not None:
            try:
                await self._log_overdue_events(self._last_run, now)
            except Exception as e:
                logger.error(f"Overdue event detection failed: {e}", exc_info=True)

        self._last_run = now
        return stats

    async def _log_overdue_events(self, earlier: datetime, later: datetime):
        kpis = await self._reminder_service.kpi_repo.list_for_reminder()
        events = self._status_service.detect_overdue_events(kpis, earlier, later)
        for event in events:
            logger.warning(
                f"KPI '{event.kpi_name}' ({event.kpi_id}) became overdue: "
                f"{event.days_overdue} days, escalation level {event.escalation_level}"
            )
