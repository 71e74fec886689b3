"""Exceptions raised while resolving a single conflicted file."""

from src.git_client.errors import SyncError


class ConflictResolutionError(SyncError):
    """Raised when one conflicted file cannot be resolved."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(f"Could not resolve {file_path}: {reason}")
        self.file_path = file_path
        self.reason = reason
