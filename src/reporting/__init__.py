"""Email reporting for sync runs.

This package renders batch summaries and the daily log summary as plain
text and delivers them over SMTP.
"""

from .errors import ReportError
from .mailer import EmailReporter, Mailer
from .report_formatter import (
    collect_today_log_lines,
    format_daily_report,
    format_sync_report,
)

__all__ = [
    'ReportError',
    'EmailReporter',
    'Mailer',
    'collect_today_log_lines',
    'format_daily_report',
    'format_sync_report',
]
