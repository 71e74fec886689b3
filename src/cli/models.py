"""Data models for CLI operations."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for the fork-sync command.

    - SUCCESS (0): Every selected repository synced or was already up to date
    - GENERAL_ERROR (1): Configuration, schedule or unexpected errors
    - SYNC_FAILED (2): At least one repository failed to sync
    - ACCOUNT_NOT_FOUND (3): --account matched no configured account
    - RUN_IN_PROGRESS (4): Another run holds the run lock

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    SYNC_FAILED = 2
    ACCOUNT_NOT_FOUND = 3
    RUN_IN_PROGRESS = 4
