"""Unit tests for sync_engine.models module."""

import pytest

from src.sync_engine.models import BatchSummary, SyncOutcome, SyncStatus, TestsStatus


def outcome(status, success=None, **kwargs):
    if success is None:
        success = status is not SyncStatus.ERROR
    return SyncOutcome(repository="acme/widgets", account="acme", success=success, status=status, **kwargs)


class TestSyncOutcome:
    """Test cases for SyncOutcome invariants."""

    def test_error_cannot_be_successful(self):
        with pytest.raises(ValueError):
            outcome(SyncStatus.ERROR, success=True)

    def test_synced_must_be_successful(self):
        with pytest.raises(ValueError):
            outcome(SyncStatus.SYNCED, success=False)

    def test_skipped_cannot_have_conflicts(self):
        with pytest.raises(ValueError):
            outcome(SyncStatus.SKIPPED, had_conflicts=True)

    def test_manual_intervention_only_on_errors(self):
        with pytest.raises(ValueError):
            outcome(SyncStatus.SYNCED, requires_manual_intervention=True)
        assert outcome(SyncStatus.ERROR, requires_manual_intervention=True).requires_manual_intervention

    def test_with_tests_status_returns_copy(self):
        original = outcome(SyncStatus.SYNCED)
        updated = original.with_tests_status(TestsStatus.FAILED)

        assert original.tests_status is TestsStatus.ABSENT
        assert updated.tests_status is TestsStatus.FAILED
        assert updated.success is True

    def test_is_immutable(self):
        with pytest.raises(AttributeError):
            outcome(SyncStatus.SYNCED).success = False


class TestBatchSummary:
    """Test cases for BatchSummary aggregation."""

    def test_counts_each_status(self):
        summary = BatchSummary(account="acme")
        summary.record(outcome(SyncStatus.SYNCED))
        summary.record(outcome(SyncStatus.SKIPPED))
        summary.record(outcome(SyncStatus.ERROR, error="boom"))

        assert (summary.synced_repos, summary.skipped_repos, summary.failed_repos) == (1, 1, 1)
        assert summary.total_repos == 3
        assert summary.success is False

    def test_success_with_no_outcomes(self):
        assert BatchSummary(account="acme").complete().success is True

    def test_completed_summary_rejects_outcomes(self):
        summary = BatchSummary(account="acme").complete()
        with pytest.raises(RuntimeError):
            summary.record(outcome(SyncStatus.SYNCED))

    def test_account_filter_mismatch(self):
        summary = BatchSummary.account_filter_mismatch("acme", "globex")
        assert summary.success is False
        assert summary.completed is True
        assert summary.total_repos == 0
