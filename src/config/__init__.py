"""Configuration loading for fork-sync.

This package loads the YAML/JSON configuration file into typed dataclasses
and parses the "owner/repo:branch" repository identifiers used throughout
the tool.
"""

from .config_loader import ConfigLoader, resolve_env_vars
from .errors import (
    ConfigurationError,
    ConfigError,
    FilesystemError,
    InvalidRepoIdentifierError,
)
from .identifiers import RepoRef, parse_repo_identifier, is_valid_repo_identifier
from .models import (
    Account,
    AppConfig,
    EmailConfig,
    LLMConfig,
    LogOptions,
    RepoPairConfig,
)

__all__ = [
    'ConfigLoader',
    'resolve_env_vars',
    'ConfigurationError',
    'ConfigError',
    'FilesystemError',
    'InvalidRepoIdentifierError',
    'RepoRef',
    'parse_repo_identifier',
    'is_valid_repo_identifier',
    'Account',
    'AppConfig',
    'EmailConfig',
    'LLMConfig',
    'LogOptions',
    'RepoPairConfig',
]
