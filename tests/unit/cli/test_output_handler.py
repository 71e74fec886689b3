"""Unit tests for cli.output module."""

from io import StringIO

import pytest
from rich.console import Console

from src.cli.output import OutputHandler
from src.sync_engine.models import BatchSummary, SyncOutcome, SyncStatus, TestsStatus


@pytest.fixture
def handler():
    output = OutputHandler(verbosity=0, no_color=True)
    output.console = Console(file=StringIO(), width=200, no_color=True, highlight=False)
    return output


def printed(handler):
    return handler.console.file.getvalue()


def summary_with(*outcomes):
    summary = BatchSummary(account="acme")
    for outcome in outcomes:
        summary.record(outcome)
    return summary.complete()


class TestOutputHandlerInit:
    """Test cases for OutputHandler initialization."""

    def test_defaults(self):
        output = OutputHandler()
        assert output.verbosity == 0
        assert output.console is not None

    def test_no_color(self):
        assert OutputHandler(no_color=True).console.no_color is True


class TestMessages:
    """Test cases for status message helpers."""

    def test_success_and_error(self, handler):
        handler.success("done")
        handler.error("broken")

        assert "✓ done" in printed(handler)
        assert "✗ broken" in printed(handler)

    def test_info_hidden_at_verbosity_0(self, handler):
        handler.info("details")
        assert printed(handler) == ""

    def test_info_shown_at_verbosity_1(self, handler):
        handler.verbosity = 1
        handler.info("details")
        assert "details" in printed(handler)


class TestPrintBatchSummary:
    """Test cases for print_batch_summary()."""

    def test_successful_batch(self, handler):
        handler.print_batch_summary(summary_with(SyncOutcome(
            repository="acme/widgets", account="acme", success=True, status=SyncStatus.SYNCED,
            had_conflicts=True, used_resolver=True, tests_status=TestsStatus.PASSED,
            message="Successfully resolved 1 conflicted file(s) and pushed changes",
        )))

        output = printed(handler)
        assert "Sync Summary (acme)" in output
        assert "acme/widgets" in output
        assert "resolved by LLM" in output
        assert "passed" in output
        assert "Synced: 1" in output
        assert "Sync completed successfully" in output

    def test_all_skipped(self, handler):
        handler.print_batch_summary(summary_with(SyncOutcome(
            repository="acme/widgets", account="acme", success=True, status=SyncStatus.SKIPPED,
            message="No upstream changes to sync",
        )))

        assert "Already in sync. No upstream changes." in printed(handler)

    def test_failures(self, handler):
        handler.print_batch_summary(summary_with(SyncOutcome(
            repository="acme/widgets", account="acme", success=False, status=SyncStatus.ERROR,
            error="Rollback to a1b2 failed", requires_manual_intervention=True,
        )))

        output = printed(handler)
        assert "MANUAL INTERVENTION REQUIRED" in output
        assert "Failed: 1" in output
        assert "Sync completed with failures" in output

    def test_no_matching_repositories(self, handler):
        handler.print_batch_summary(BatchSummary(account="acme").complete())
        assert "No repositories matched" in printed(handler)

    def test_account_filter_mismatch(self, handler):
        handler.print_batch_summary(BatchSummary.account_filter_mismatch("acme", "globex"))

        output = printed(handler)
        assert "Account acme skipped" in output
        assert "Sync Summary" not in output
