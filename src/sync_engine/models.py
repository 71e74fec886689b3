"""Outcome and summary models for sync runs.

SyncOutcome is immutable and validates its status invariants on creation.
BatchSummary is filled in by the orchestrator one outcome at a time and
locked once the batch completes.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional


class SyncStatus(str, Enum):
    """Terminal status of one repository pair."""
    SYNCED = "synced"
    SKIPPED = "skipped"
    ERROR = "error"


class TestsStatus(str, Enum):
    """Result of the post-merge test gate."""
    __test__ = False

    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"
    ABSENT = "absent"


class BatchStatus(str, Enum):
    COMPLETED = "completed"
    ACCOUNT_FILTER_MISMATCH = "account_filter_mismatch"


@dataclass(frozen=True)
class SyncOutcome:
    """Result of syncing one fork with its upstream.

    Attributes:
        repository: Fork full name ("owner/repo")
        account: Account name
        success: True for synced and skipped outcomes
        status: Terminal status
        had_conflicts: The merge stopped on content conflicts
        used_resolver: The conflict resolver was invoked
        tests_status: Post-merge test result (absent when tests did not run)
        message: Human readable summary
        error: Failure description (status=error only)
        requires_manual_intervention: Rollback failed, the working copy may be mid-merge

    Example:
        >>> SyncOutcome(repository="acme/widgets", account="acme",
        ...             success=True, status=SyncStatus.SKIPPED,
        ...             message="No upstream changes to sync")
    """
    repository: str
    account: str
    success: bool
    status: SyncStatus
    had_conflicts: bool = False
    used_resolver: bool = False
    tests_status: TestsStatus = TestsStatus.ABSENT
    message: Optional[str] = None
    error: Optional[str] = None
    requires_manual_intervention: bool = False

    def __post_init__(self):
        if self.status is SyncStatus.ERROR and self.success:
            raise ValueError("An outcome with status=error cannot be successful")
        if self.status is not SyncStatus.ERROR and not self.success:
            raise ValueError(f"An outcome with status={self.status.value} must be successful")
        if self.status is SyncStatus.SKIPPED and (self.had_conflicts or self.used_resolver):
            raise ValueError("A skipped outcome cannot have attempted a merge")
        if self.requires_manual_intervention and self.status is not SyncStatus.ERROR:
            raise ValueError("Only failed outcomes can require manual intervention")

    def with_tests_status(self, tests_status: TestsStatus) -> 'SyncOutcome':
        return replace(self, tests_status=tests_status)


@dataclass
class BatchSummary:
    """Aggregated result of one account's batch run.

    Attributes:
        account: Account name
        status: COMPLETED, or ACCOUNT_FILTER_MISMATCH when the batch was skipped
        success: False as soon as one repository failed
        synced_repos: Count of synced outcomes
        failed_repos: Count of failed outcomes
        skipped_repos: Count of skipped outcomes
        outcomes: Outcomes in processing order
        message: Explanation for a skipped batch
    """
    account: str
    status: BatchStatus = BatchStatus.COMPLETED
    success: bool = True
    synced_repos: int = 0
    failed_repos: int = 0
    skipped_repos: int = 0
    outcomes: List[SyncOutcome] = field(default_factory=list)
    message: Optional[str] = None
    completed: bool = field(default=False, repr=False)

    def record(self, outcome: SyncOutcome) -> None:
        """Add one outcome and update the counters."""
        if self.completed:
            raise RuntimeError("Cannot record outcomes on a completed batch")

        self.outcomes.append(outcome)
        if outcome.success and outcome.status is SyncStatus.SYNCED:
            self.synced_repos += 1
        elif outcome.success and outcome.status is SyncStatus.SKIPPED:
            self.skipped_repos += 1
        else:
            self.failed_repos += 1
            self.success = False

    def complete(self) -> 'BatchSummary':
        self.completed = True
        return self

    @property
    def total_repos(self) -> int:
        return len(self.outcomes)

    @classmethod
    def account_filter_mismatch(cls, account: str, selector: str) -> 'BatchSummary':
        return cls(
            account=account,
            status=BatchStatus.ACCOUNT_FILTER_MISMATCH,
            success=False,
            message=f"Account '{account}' does not match filter '{selector}'",
            completed=True,
        )
