"""Cron-based scheduling of sync runs."""

from .scheduler import (
    DAILY_REPORT_SCHEDULE,
    ScheduledJob,
    Scheduler,
    SchedulerError,
    parse_cron_expression,
)

__all__ = [
    'DAILY_REPORT_SCHEDULE',
    'ScheduledJob',
    'Scheduler',
    'SchedulerError',
    'parse_cron_expression',
]
