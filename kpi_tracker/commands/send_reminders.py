"""
Send the daily KPI reminders.

Usage:
    kpi-send-reminders                  # evaluate and send
    kpi-send-reminders --dry-run        # only show what would be sent
    kpi-send-reminders -t me@example.com
    kpi-send-reminders --now 2024-10-08 --data-file ./data/kpis.json
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from kpi_tracker.core.config import get_settings
from kpi_tracker.core.exceptions import KpiTrackerError
from kpi_tracker.core.logger import logger
from kpi_tracker.infrastructure.local.json_store import (
    JsonDataStore,
    JsonKpiRepository,
    JsonUserRepository,
)
from kpi_tracker.infrastructure.local.logging_mailer import LoggingReminderMailer
from kpi_tracker.interfaces.clock import IClock
from kpi_tracker.models.reminder import ReminderRunStats
from kpi_tracker.services.reminder_service import ReminderService
from kpi_tracker.utils.datetime_utils import FixedClock, SystemClock, parse_iso_datetime


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kpi-send-reminders",
        description="Send KPI reminder and escalation e-mails.",
    )
    parser.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        help="Evaluate reminders without sending anything.",
    )
    parser.add_argument(
        "-t",
        "--test-email",
        metavar="ADDRESS",
        help="Send a test e-mail to ADDRESS and exit.",
    )
    parser.add_argument(
        "--data-file",
        metavar="PATH",
        help="JSON data file (default: DATA_FILE setting).",
    )
    parser.add_argument(
        "--now",
        metavar="ISO_DATETIME",
        type=parse_iso_datetime,
        help="Evaluate as if it were this instant.",
    )
    return parser


def build_service(data_file: Optional[str], clock: IClock) -> ReminderService:
    store = JsonDataStore(data_file)
    return ReminderService(
        kpi_repo=JsonKpiRepository(store),
        user_repo=JsonUserRepository(store),
        mailer=LoggingReminderMailer(),
        clock=clock,
    )


def print_summary(stats: ReminderRunStats) -> None:
    print("=" * 40)
    print("  DRY RUN" if stats.dry_run else "  Reminder run")
    print("=" * 40)
    rows = [
        ("Sent", stats.sent),
        ("Failed", stats.failed),
        ("Skipped", stats.skipped),
        ("Escalations", stats.escalations),
        ("Evaluation failures", stats.evaluation_failures),
    ]
    for label, count in rows:
        print(f"  {label:20s} {count:5d}")


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    clock: IClock = FixedClock(args.now) if args.now else SystemClock(settings.TIMEZONE or None)
    service = build_service(args.data_file, clock)

    if args.test_email:
        if await service.send_test_email(args.test_email):
            print(f"Test e-mail sent to {args.test_email}")
            return 0
        print(f"Test e-mail to {args.test_email} failed", file=sys.stderr)
        return 1

    stats = await service.send_due_reminders(dry_run=args.dry_run)
    print_summary(stats)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except KpiTrackerError as e:
        logger.error(f"Reminder run failed: {e.message}")
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
