"""Unit tests for reporting.report_formatter module."""

from datetime import date

from src.reporting.report_formatter import (
    DAILY_REPORT_SUBJECT,
    SEPARATOR,
    collect_today_log_lines,
    format_daily_report,
    format_sync_report,
)
from src.sync_engine.models import BatchSummary, SyncOutcome, SyncStatus, TestsStatus


def summary_with(*outcomes):
    summary = BatchSummary(account="acme")
    for outcome in outcomes:
        summary.record(outcome)
    return summary.complete()


SYNCED = SyncOutcome(
    repository="acme/widgets", account="acme", success=True, status=SyncStatus.SYNCED,
    had_conflicts=True, used_resolver=True, tests_status=TestsStatus.PASSED,
    message="Successfully resolved 1 conflicted file(s) and pushed changes",
)
FAILED = SyncOutcome(
    repository="acme/gadgets", account="acme", success=False, status=SyncStatus.ERROR,
    error="Failed to push main to origin: rejected", requires_manual_intervention=True,
)


class TestFormatSyncReport:
    """Test cases for format_sync_report function."""

    def test_success_subject(self):
        subject, body = format_sync_report(summary_with(SYNCED))

        assert subject == "Fork Sync Report (acme): Success"
        assert "Overall Status: All operations successful" in body
        assert "Synced Repositories: 1" in body

    def test_failure_subject_and_details(self):
        subject, body = format_sync_report(summary_with(SYNCED, FAILED))

        assert subject == "Fork Sync Report (acme): Some Operations Failed"
        assert "Failed Repositories: 1" in body
        assert body.count(SEPARATOR) == 2
        assert "Conflicts Encountered: Yes" in body
        assert "LLM Used for Resolution: Yes" in body
        assert "Tests Status: passed" in body
        assert "Error: Failed to push main to origin: rejected" in body
        assert "MANUAL INTERVENTION REQUIRED" in body

    def test_outcome_without_extras(self):
        skipped = SyncOutcome(
            repository="acme/widgets", account="acme", success=True,
            status=SyncStatus.SKIPPED, message="No upstream changes to sync",
        )
        _, body = format_sync_report(summary_with(skipped))

        assert "Status: skipped" in body
        assert "Conflicts Encountered" not in body
        assert "Tests Status" not in body

    def test_empty_batch(self):
        _, body = format_sync_report(summary_with())
        assert "No repositories were processed." in body


class TestDailyReport:
    """Test cases for the daily log summary."""

    def test_collects_only_todays_records(self, tmp_path):
        log_file = tmp_path / "fork-sync.log"
        log_file.write_text(
            "2026-03-01 23:59:59 - src.x - INFO - yesterday\n"
            "2026-03-02 00:00:01 - src.x - ERROR - today failed\n"
            "Traceback (most recent call last):\n"
            "  boom\n"
            "2026-03-02 04:00:00 - src.x - INFO - today done\n"
        )

        lines = collect_today_log_lines(str(log_file), today=date(2026, 3, 2))

        assert lines == [
            "2026-03-02 00:00:01 - src.x - ERROR - today failed",
            "Traceback (most recent call last):",
            "  boom",
            "2026-03-02 04:00:00 - src.x - INFO - today done",
        ]

    def test_missing_log_file(self, tmp_path):
        assert collect_today_log_lines(str(tmp_path / "none.log")) == []

    def test_daily_report_bodies(self):
        subject, body = format_daily_report(["2026-03-02 line"])
        assert subject == DAILY_REPORT_SUBJECT
        assert "2026-03-02 line" in body

        assert "No activity recorded today." in format_daily_report([])[1]
        assert "Could not retrieve logs for today." in format_daily_report(None)[1]
