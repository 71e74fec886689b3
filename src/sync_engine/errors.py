"""Error taxonomy of the per-repository sync engine.

Every error below is fatal to a single repository pair only. The engine
converts them to SyncOutcome records with status=error; none of them ever
aborts a batch.
"""

from src.config.errors import InvalidRepoIdentifierError
from src.git_client.errors import SyncError
from src.tester.errors import TestExecutionError


class SyncEngineError(SyncError):
    """Base exception for sync engine failures."""
    pass


class InitializationError(SyncEngineError):
    """Raised when the working copy cannot be cloned, configured or checked out."""

    def __init__(self, repository: str, reason: str):
        super().__init__(f"Repository initialization failed for {repository}: {reason}")
        self.repository = repository
        self.reason = reason


class DriftCheckError(SyncEngineError):
    """Raised when upstream changes cannot be determined (fetch or rev-list failed)."""

    def __init__(self, reason: str):
        super().__init__(f"Failed to check for upstream changes: {reason}")
        self.reason = reason


class CleanMergeFailure(SyncEngineError):
    """Raised when a merge fails for a reason other than content conflicts."""

    def __init__(self, reason: str):
        super().__init__(f"Failed to merge: {reason}")
        self.reason = reason


class ConflictDiscoveryFailure(SyncEngineError):
    """Raised when git reported a conflict but no unmerged paths can be listed."""

    def __init__(self, reason: str = ""):
        message = "Failed to identify conflicted files for resolution"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.reason = reason


class ConflictResolutionFailure(SyncEngineError):
    """Raised when the conflict resolver could not resolve every file."""

    def __init__(self, resolver_error: str):
        super().__init__(f"Failed to resolve conflicts: {resolver_error}")
        self.resolver_error = resolver_error


class PushFailure(SyncEngineError):
    """Raised when the merged fork branch cannot be pushed to origin."""

    def __init__(self, branch: str, reason: str):
        super().__init__(f"Failed to push {branch} to origin: {reason}")
        self.branch = branch
        self.reason = reason


class RollbackFailure(SyncEngineError):
    """Raised when neither `merge --abort` nor a hard reset restored the working copy.

    The working copy may be left mid-merge and needs manual intervention.
    """

    def __init__(self, anchor: str, cause: str, reason: str):
        super().__init__(
            f"{cause}. Rollback to {anchor} failed ({reason}); "
            f"working copy requires manual intervention"
        )
        self.anchor = anchor
        self.cause = cause
        self.reason = reason


__all__ = [
    'SyncEngineError',
    'InitializationError',
    'DriftCheckError',
    'CleanMergeFailure',
    'ConflictDiscoveryFailure',
    'ConflictResolutionFailure',
    'PushFailure',
    'RollbackFailure',
    'TestExecutionError',
    'InvalidRepoIdentifierError',
]
