"""Plain-text rendering of sync and daily reports."""

import os
from datetime import date
from typing import List, Optional, Tuple

from src.sync_engine.models import BatchSummary, SyncOutcome, TestsStatus

SEPARATOR = "-" * 36

DAILY_REPORT_SUBJECT = "Fork Sync Daily Summary Report"


def format_sync_report(summary: BatchSummary) -> Tuple[str, str]:
    """Render a batch summary as an email subject and body.

    Args:
        summary: Completed batch summary

    Returns:
        (subject, body) tuple
    """
    status = "Success" if summary.success else "Some Operations Failed"
    subject = f"Fork Sync Report ({summary.account}): {status}"

    lines = [
        "Fork Synchronization Report:",
        "",
        f"Account: {summary.account}",
        "Overall Status: "
        + ("All operations successful" if summary.success else "One or more operations failed"),
        f"Synced Repositories: {summary.synced_repos}",
        f"Failed Repositories: {summary.failed_repos}",
        f"Skipped Repositories (already up-to-date): {summary.skipped_repos}",
        "",
        "Details:",
    ]

    if not summary.outcomes:
        lines.append("No repositories were processed.")

    for outcome in summary.outcomes:
        lines.append(SEPARATOR)
        lines.extend(_format_outcome(outcome))

    return subject, "\n".join(lines) + "\n"


def _format_outcome(outcome: SyncOutcome) -> List[str]:
    lines = [
        f"Account: {outcome.account}",
        f"Repository: {outcome.repository}",
        f"Status: {outcome.status.value}",
    ]
    if outcome.message:
        lines.append(f"Message: {outcome.message}")
    if outcome.error:
        lines.append(f"Error: {outcome.error}")
    if outcome.had_conflicts:
        lines.append("Conflicts Encountered: Yes")
    if outcome.used_resolver:
        lines.append("LLM Used for Resolution: Yes")
    if outcome.tests_status is not TestsStatus.ABSENT:
        lines.append(f"Tests Status: {outcome.tests_status.value}")
    if outcome.requires_manual_intervention:
        lines.append("MANUAL INTERVENTION REQUIRED: working copy could not be rolled back")
    return lines


def collect_today_log_lines(log_file: str, today: Optional[date] = None) -> List[str]:
    """Return the lines of a log file written today.

    Log records start with an ISO date ("YYYY-MM-DD HH:MM:SS"); continuation
    lines (tracebacks, multi-line messages) follow the record they belong to.

    Raises:
        OSError: If the file exists but cannot be read
    """
    if not os.path.isfile(log_file):
        return []

    prefix = (today or date.today()).isoformat()
    collected = []
    in_today = False
    with open(log_file, 'r', encoding='utf-8', errors='replace') as f:
        for line in f:
            line = line.rstrip('\n')
            if len(line) >= 10 and line[4] == '-' and line[7] == '-' and line[:4].isdigit():
                in_today = line.startswith(prefix)
            if in_today:
                collected.append(line)
    return collected


def format_daily_report(log_lines: Optional[List[str]]) -> Tuple[str, str]:
    """Render today's log lines as the daily summary email.

    Args:
        log_lines: Today's log lines, or None when they could not be read
    """
    body = "Daily Summary Report for Fork Sync Tool\n\n"
    if log_lines is None:
        body += "Could not retrieve logs for today.\n"
    elif not log_lines:
        body += "No activity recorded today.\n"
    else:
        body += "Today's activity log summary:\n\n" + "\n".join(log_lines) + "\n"
    return DAILY_REPORT_SUBJECT, body
