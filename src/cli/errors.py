"""Typed exception hierarchy for CLI-related errors."""

from src.git_client.errors import SyncError


class CLIError(SyncError):
    """Base exception for all CLI-related errors."""
    pass


class ConfigNotFoundError(CLIError):
    """Raised when configuration file is not found."""

    def __init__(self, config_path: str):
        super().__init__(
            f"Configuration file not found at {config_path}"
        )
        self.config_path = config_path


class AccountNotFoundError(CLIError):
    """Raised when --account names no configured account."""

    def __init__(self, account: str):
        super().__init__(f"No account named '{account}' in configuration")
        self.account = account
