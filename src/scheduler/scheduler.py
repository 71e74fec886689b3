"""Cron-driven scheduling of sync runs.

Cron expressions are parsed into celery crontab schedules, which also
compute the next due time. The scheduler runs in the calling thread and
waits on a threading.Event, so stop() interrupts the wait immediately.
Jobs run one at a time; a job still running when its next slot passes is
not started again until it has finished.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional

from celery.schedules import ParseException, crontab

from src.config.models import AppConfig
from src.git_client.errors import SyncError

logger = logging.getLogger(__name__)

DAILY_REPORT_SCHEDULE = "0 6 * * *"

# Upper bound for a single wait, so clock jumps are picked up
MAX_WAIT_SECONDS = 300


class SchedulerError(SyncError):
    """Raised for invalid schedules."""

    def __init__(self, message: str):
        super().__init__(f"Scheduler error: {message}")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_cron_expression(expression: str, nowfun: Callable[[], datetime] = utc_now) -> crontab:
    """Build a crontab schedule from a 5-field cron expression.

    Fields are minute, hour, day of month, month, day of week; times are UTC.

    Raises:
        SchedulerError: If the expression is malformed

    Example:
        >>> parse_cron_expression("0 4 * * *")
        <crontab: 0 4 * * * (m/h/dM/MY/d)>
    """
    if not isinstance(expression, str) or not expression.strip():
        raise SchedulerError(f"Invalid cron schedule expression: {expression!r}")

    fields = expression.split()
    if len(fields) != 5:
        raise SchedulerError(
            f"Invalid cron schedule expression: {expression!r} (expected 5 fields, got {len(fields)})"
        )

    minute, hour, day_of_month, month_of_year, day_of_week = fields
    try:
        return crontab(
            minute=minute,
            hour=hour,
            day_of_month=day_of_month,
            month_of_year=month_of_year,
            day_of_week=day_of_week,
            nowfun=nowfun,
        )
    except (ParseException, ValueError) as e:
        raise SchedulerError(f"Invalid cron schedule expression: {expression!r} ({e})")


@dataclass
class ScheduledJob:
    """A callable bound to a crontab schedule.

    Attributes:
        name: Name used in log messages
        schedule: When the job is due
        func: Callable invoked without arguments
        next_run_at: Next due time (UTC)
    """
    name: str
    schedule: crontab
    func: Callable[[], object]
    next_run_at: Optional[datetime] = None

    def plan_after(self, last_run_at: datetime, now: datetime) -> None:
        self.next_run_at = now + self.schedule.remaining_estimate(last_run_at)


class Scheduler:
    """Runs the sync job on the configured schedule.

    Example:
        >>> scheduler = Scheduler(config, job=lambda: sync_command.run_batch(),
        ...                       report_job=reporter.send_daily_report)
        >>> scheduler.run_forever()  # until stop() or KeyboardInterrupt
    """

    def __init__(
        self,
        config: AppConfig,
        job: Callable[[], object],
        report_job: Optional[Callable[[], object]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize scheduler.

        Args:
            config: Application configuration (schedule, send_daily_report)
            job: Sync job
            report_job: Daily report job, scheduled when send_daily_report is set
            clock: Returns the current aware datetime

        Raises:
            SchedulerError: If the configured schedule is invalid
        """
        self._clock = clock
        self._stop_event = threading.Event()

        self.jobs: List[ScheduledJob] = [
            ScheduledJob("sync", parse_cron_expression(config.schedule, clock), job),
        ]
        logger.info(f"Setting up scheduler with expression: {config.schedule}")

        if report_job is not None and config.send_daily_report:
            logger.info(f"Setting up daily report scheduler with expression: {DAILY_REPORT_SCHEDULE}")
            self.jobs.append(
                ScheduledJob("daily report", parse_cron_expression(DAILY_REPORT_SCHEDULE, clock), report_job)
            )

        now = self._clock()
        for scheduled in self.jobs:
            scheduled.plan_after(now, now)

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        logger.info("Stopping scheduler")
        self._stop_event.set()

    def seconds_until_next_run(self) -> float:
        now = self._clock()
        next_run = min(scheduled.next_run_at for scheduled in self.jobs)
        return max(0.0, (next_run - now).total_seconds())

    def run_pending(self) -> int:
        """Run every job whose due time has passed.

        Returns:
            Number of jobs executed
        """
        executed = 0
        for scheduled in self.jobs:
            if self.stopped:
                break
            if self._clock() < scheduled.next_run_at:
                continue

            logger.info(f"Starting scheduled {scheduled.name} task")
            try:
                scheduled.func()
                logger.info(f"Scheduled {scheduled.name} task completed")
            except Exception as e:
                logger.exception(f"Error in scheduled {scheduled.name} task: {e}")
            executed += 1

            now = self._clock()
            scheduled.plan_after(now, now)
            logger.info(f"Next {scheduled.name} run at {scheduled.next_run_at.isoformat()}")

        return executed

    def run_forever(self) -> None:
        """Wait for and run due jobs until stop() is called."""
        for scheduled in self.jobs:
            logger.info(f"Next {scheduled.name} run at {scheduled.next_run_at.isoformat()}")

        while not self.stopped:
            wait = min(self.seconds_until_next_run(), MAX_WAIT_SECONDS)
            if wait > 0 and self._stop_event.wait(wait):
                break
            self.run_pending()

        logger.info("Scheduler stopped")
