"""Exceptions raised while building or delivering reports."""

from src.git_client.errors import SyncError


class ReportError(SyncError):
    """Raised when a report email cannot be delivered."""

    def __init__(self, message: str):
        super().__init__(f"Report delivery failed: {message}")
