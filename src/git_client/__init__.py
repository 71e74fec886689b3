"""Git command wrapper used to drive fork working copies.

This package provides the repository client consumed by the sync engine:
clone, remote management, fetch, checkout, merge, conflict status, commit,
push and history queries, all executed through the git binary with bounded
timeouts.
"""

from src.git_client.credentials import (
    build_fork_url,
    build_upstream_url,
    sanitize_credentials,
)
from src.git_client.errors import GitRepositoryError, MergeConflictError, SyncError
from src.git_client.git_client import GitClient
from src.git_client.models import Remote, RepoStatus

__all__ = [
    # Errors
    'SyncError',
    'GitRepositoryError',
    'MergeConflictError',
    # Components
    'GitClient',
    # Models
    'Remote',
    'RepoStatus',
    # Helpers
    'build_fork_url',
    'build_upstream_url',
    'sanitize_credentials',
]
