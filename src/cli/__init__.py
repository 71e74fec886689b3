"""Command-line interface for fork synchronization.

This package provides the `fork-sync` CLI tool. It loads the configuration,
runs the batch orchestrator once or on a cron schedule, prints per-account
summaries with Rich and maps the result to an exit code.
"""

from .sync_command import SyncCommand
from .models import ExitCode
from .errors import (
    CLIError,
    ConfigNotFoundError,
    AccountNotFoundError,
)

__all__ = [
    'SyncCommand',
    'ExitCode',
    'CLIError',
    'ConfigNotFoundError',
    'AccountNotFoundError',
]
