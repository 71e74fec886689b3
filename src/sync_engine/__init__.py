"""Fork synchronization core.

This package contains the per-repository sync state machine (SyncEngine),
the batch orchestrator that runs it across an account's repositories, the
outcome/summary models and the run lock that serializes whole batches.
"""

from .context_logger import RepoLogger
from .engine import SyncEngine, working_dir_name
from .errors import (
    SyncEngineError,
    InitializationError,
    DriftCheckError,
    CleanMergeFailure,
    ConflictDiscoveryFailure,
    ConflictResolutionFailure,
    PushFailure,
    RollbackFailure,
)
from .models import BatchStatus, BatchSummary, SyncOutcome, SyncStatus, TestsStatus
from .orchestrator import BatchOrchestrator, select_repos
from .run_lock import RunLock, RunInProgressError

__all__ = [
    'RepoLogger',
    'SyncEngine',
    'working_dir_name',
    'SyncEngineError',
    'InitializationError',
    'DriftCheckError',
    'CleanMergeFailure',
    'ConflictDiscoveryFailure',
    'ConflictResolutionFailure',
    'PushFailure',
    'RollbackFailure',
    'BatchStatus',
    'BatchSummary',
    'SyncOutcome',
    'SyncStatus',
    'TestsStatus',
    'BatchOrchestrator',
    'select_repos',
    'RunLock',
    'RunInProgressError',
]
