"""Typed exception hierarchy for configuration errors.

This module defines all custom exceptions raised while loading and
validating the fork-sync configuration file.
"""

from typing import Optional

from src.git_client.errors import SyncError


class ConfigurationError(SyncError):
    """Base exception for all configuration errors."""
    pass


class FilesystemError(ConfigurationError):
    """Raised when filesystem operations fail (read, permissions, etc)."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class ConfigError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class InvalidRepoIdentifierError(ConfigurationError):
    """Raised when a repository identifier is not "owner/repo:branch"."""

    def __init__(self, identifier: str):
        super().__init__(
            f"Invalid repository identifier '{identifier}'. Must be \"owner/repo:branch\""
        )
        self.identifier = identifier
