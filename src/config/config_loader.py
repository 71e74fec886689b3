"""YAML/JSON configuration loading and validation.

This module loads the fork-sync configuration file, resolves ${VAR}
references from the environment (after loading `.env` with python-dotenv),
applies defaults, and validates every field into an AppConfig.
"""

import json
import logging
import os
import re
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigError, FilesystemError, InvalidRepoIdentifierError
from .identifiers import parse_repo_identifier
from .models import (
    DEFAULT_LLM_BASE_URL,
    Account,
    AppConfig,
    EmailConfig,
    LLMConfig,
    LogOptions,
    RepoPairConfig,
)

logger = logging.getLogger(__name__)

ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

# Whole-line `//` comments in JSON files; URLs inside strings are untouched
JSON_COMMENT_PATTERN = re.compile(r'^\s*//.*$', re.MULTILINE)

LOG_LEVELS = {'debug', 'info', 'warning', 'error', 'critical'}


def resolve_env_vars(value: Any) -> Any:
    """Replace ${VAR} references in every string of a nested structure.

    Unset variables resolve to an empty string.

    Example:
        >>> os.environ['TOKEN'] = 'abc'
        >>> resolve_env_vars({'token': '${TOKEN}', 'repos': ['x-${NOPE}']})
        {'token': 'abc', 'repos': ['x-']}
    """
    if isinstance(value, str):
        return ENV_VAR_PATTERN.sub(lambda m: os.environ.get(m.group(1), ''), value)
    if isinstance(value, dict):
        return {key: resolve_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_env_vars(item) for item in value]
    return value


class ConfigLoader:
    """Handles configuration file loading and validation.

    Configuration file structure:
        accounts:
          - name: "acme"
            token: "${GITHUB_TOKEN}"
            repos:
              - upstream: "octo/widgets:main"
                fork: "acme/widgets:main"
        repos_base_dir: "./repositories"
        schedule: "0 4 * * *"
        llm:
          api_key: "${OPENAI_API_KEY}"
        email:
          smtp_host: "smtp.example.com"
          smtp_port: 587
          from: "fork-sync@example.com"
          to: ["ops@example.com"]

    A single `account:` mapping may be given instead of `accounts:`.
    """

    # Required fields for each account
    REQUIRED_ACCOUNT_FIELDS = {'token', 'repos'}

    # Required fields for each repository pair
    REQUIRED_REPO_FIELDS = {'upstream', 'fork'}

    # Required fields of the email section
    REQUIRED_EMAIL_FIELDS = {'smtp_host', 'smtp_port', 'from', 'to'}

    # Defaults that are reported at warning level when applied
    DEFAULTS = {
        'repos_base_dir': './repositories',
        'schedule': '0 4 * * *',
    }

    @classmethod
    def load(cls, config_path: str, load_env: bool = True) -> AppConfig:
        """Load and parse configuration from a YAML or JSON file.

        Args:
            config_path: Path to the configuration file
            load_env: Load a `.env` file into the environment first

        Returns:
            AppConfig object with parsed configuration

        Raises:
            FilesystemError: If file cannot be read
            ConfigError: If configuration is invalid or malformed
        """
        if load_env:
            load_dotenv()

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise FilesystemError(config_path, 'read', 'Configuration file not found')
        except PermissionError:
            raise FilesystemError(config_path, 'read', 'Permission denied')
        except OSError as e:
            raise FilesystemError(config_path, 'read', str(e))

        config_dict = cls._parse_content(config_path, content)

        if config_dict is None:
            raise ConfigError("Configuration file is empty")

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration must be a dictionary, got {type(config_dict).__name__}"
            )

        return cls._parse_config(resolve_env_vars(config_dict))

    @classmethod
    def _parse_content(cls, config_path: str, content: str) -> Any:
        if config_path.lower().endswith('.json'):
            try:
                return json.loads(JSON_COMMENT_PATTERN.sub('', content))
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid JSON syntax: {str(e)}")

        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax: {str(e)}")

    @classmethod
    def _parse_config(cls, config_dict: Dict[str, Any]) -> AppConfig:
        """Parse and validate configuration dictionary.

        Args:
            config_dict: Raw configuration dictionary with env vars resolved

        Returns:
            Validated AppConfig object

        Raises:
            ConfigError: If configuration is invalid
        """
        accounts = cls._parse_accounts(config_dict)
        llm = cls._parse_llm(config_dict.get('llm'))
        email = cls._parse_email(config_dict.get('email'))
        log_options = cls._parse_log_options(config_dict.get('log_options'))

        values = {}
        for key, default in cls.DEFAULTS.items():
            raw = config_dict.get(key)
            if raw is None or str(raw).strip() == '':
                logger.warning(f"No {key} configured, using default: {default}")
                raw = default
            values[key] = str(raw)

        test_command = config_dict.get('test_command')
        if test_command is not None:
            test_command = str(test_command).strip() or None

        return AppConfig(
            accounts=accounts,
            llm=llm,
            repos_base_dir=values['repos_base_dir'],
            schedule=values['schedule'],
            run_tests_after_merge=cls._parse_bool(config_dict, 'run_tests_after_merge', False),
            test_command=test_command,
            send_mail_on_failure=cls._parse_bool(config_dict, 'send_mail_on_failure', False),
            send_daily_report=cls._parse_bool(config_dict, 'send_daily_report', False),
            git_host=str(config_dict.get('git_host') or 'github.com'),
            git_user_name=str(config_dict.get('git_user_name') or 'fork-sync'),
            git_user_email=str(config_dict.get('git_user_email') or 'fork-sync@localhost'),
            email=email,
            log_options=log_options,
        )

    @classmethod
    def _parse_accounts(cls, config_dict: Dict[str, Any]) -> List[Account]:
        if 'accounts' in config_dict:
            accounts_raw = config_dict['accounts']
            if not isinstance(accounts_raw, list):
                raise ConfigError("Field 'accounts' must be a list", 'accounts')
            prefix = 'accounts'
        elif 'account' in config_dict:
            accounts_raw = [config_dict['account']]
            prefix = 'account'
        else:
            raise ConfigError("Missing required field: accounts")

        if not accounts_raw:
            raise ConfigError("At least one account is required", 'accounts')

        accounts = []
        seen_names = set()
        for i, account_dict in enumerate(accounts_raw):
            field_path = prefix if prefix == 'account' else f'{prefix}[{i}]'
            if not isinstance(account_dict, dict):
                raise ConfigError("Account configuration must be a dictionary", field_path)

            missing = cls.REQUIRED_ACCOUNT_FIELDS - set(account_dict.keys())
            if missing:
                raise ConfigError(
                    f"Missing required fields: {', '.join(sorted(missing))}",
                    field_path
                )

            name = str(account_dict.get('name') or '').strip()
            if not name:
                if len(accounts_raw) > 1:
                    raise ConfigError("Field 'name' is required when several accounts are configured", field_path)
                name = 'default'
            if name in seen_names:
                raise ConfigError(f"Duplicate account name '{name}'", field_path)
            seen_names.add(name)

            token = str(account_dict.get('token') or '').strip()
            if not token:
                raise ConfigError("Field 'token' cannot be empty", f'{field_path}.token')

            repos = cls._parse_repos(account_dict.get('repos'), f'{field_path}.repos')
            accounts.append(Account(name=name, token=token, repos=repos))

        return accounts

    @classmethod
    def _parse_repos(cls, repos_raw: Any, field_path: str) -> List[RepoPairConfig]:
        if not isinstance(repos_raw, list):
            raise ConfigError("Field 'repos' must be a list", field_path)

        if not repos_raw:
            raise ConfigError("At least one repository pair is required", field_path)

        repos = []
        for i, repo_dict in enumerate(repos_raw):
            repo_path = f'{field_path}[{i}]'
            if not isinstance(repo_dict, dict):
                raise ConfigError("Repository configuration must be a dictionary", repo_path)

            missing = cls.REQUIRED_REPO_FIELDS - set(repo_dict.keys())
            if missing:
                raise ConfigError(
                    f"Missing required fields: {', '.join(sorted(missing))}",
                    repo_path
                )

            for key in ('upstream', 'fork'):
                try:
                    parse_repo_identifier(repo_dict[key])
                except InvalidRepoIdentifierError as e:
                    raise ConfigError(str(e), f'{repo_path}.{key}')

            repos.append(RepoPairConfig(
                upstream=repo_dict['upstream'],
                fork=repo_dict['fork'],
            ))

        return repos

    @classmethod
    def _parse_llm(cls, llm_raw: Any) -> LLMConfig:
        if llm_raw is None:
            raise ConfigError("Missing required field: llm")
        if not isinstance(llm_raw, dict):
            raise ConfigError("Field 'llm' must be a dictionary", 'llm')

        api_key = str(llm_raw.get('api_key') or '').strip()
        if not api_key:
            raise ConfigError("Field 'api_key' cannot be empty", 'llm.api_key')

        provider = llm_raw.get('provider')
        if not provider:
            logger.warning("No LLM provider configured, using default: openai")
            provider = 'openai'
        model = llm_raw.get('model')
        if not model:
            logger.warning("No LLM model configured, using default: gpt-4")
            model = 'gpt-4'

        try:
            llm = LLMConfig(
                api_key=api_key,
                provider=str(provider),
                model=str(model),
                base_url=str(llm_raw.get('base_url') or DEFAULT_LLM_BASE_URL).rstrip('/'),
                max_retries=int(llm_raw.get('max_retries', 3)),
                timeout=int(llm_raw.get('timeout', 120)),
                max_tokens=int(llm_raw.get('max_tokens', 4000)),
                temperature=float(llm_raw.get('temperature', 0.2)),
            )
        except (ValueError, TypeError) as e:
            raise ConfigError(f"Invalid field type: {str(e)}", 'llm')

        if llm.max_retries < 0:
            raise ConfigError("Field 'max_retries' cannot be negative", 'llm.max_retries')
        if llm.timeout < 1:
            raise ConfigError("Field 'timeout' must be at least 1", 'llm.timeout')
        if llm.max_tokens < 1:
            raise ConfigError("Field 'max_tokens' must be at least 1", 'llm.max_tokens')

        return llm

    @classmethod
    def _parse_email(cls, email_raw: Any) -> Optional[EmailConfig]:
        if email_raw is None:
            logger.warning("No email configuration found, sync reports are disabled")
            return None
        if not isinstance(email_raw, dict):
            raise ConfigError("Field 'email' must be a dictionary", 'email')

        missing = cls.REQUIRED_EMAIL_FIELDS - {
            key for key, value in email_raw.items() if value not in (None, '', [])
        }
        if missing:
            raise ConfigError(
                f"Missing required fields: {', '.join(sorted(missing))}",
                'email'
            )

        to = email_raw['to']
        if isinstance(to, str):
            recipients = [addr.strip() for addr in to.split(',') if addr.strip()]
        elif isinstance(to, list):
            recipients = [str(addr).strip() for addr in to if str(addr).strip()]
        else:
            raise ConfigError("Field 'to' must be a string or a list", 'email.to')

        try:
            smtp_port = int(email_raw['smtp_port'])
        except (ValueError, TypeError):
            raise ConfigError(
                f"Field 'smtp_port' must be an integer, got {email_raw['smtp_port']!r}",
                'email.smtp_port'
            )

        return EmailConfig(
            smtp_host=str(email_raw['smtp_host']),
            smtp_port=smtp_port,
            from_address=str(email_raw['from']),
            to=recipients,
            user=email_raw.get('user') or None,
            password=email_raw.get('password') or None,
            use_tls=cls._parse_bool(email_raw, 'use_tls', True),
        )

    @classmethod
    def _parse_log_options(cls, options_raw: Any) -> LogOptions:
        if options_raw is None:
            return LogOptions()
        if not isinstance(options_raw, dict):
            raise ConfigError("Field 'log_options' must be a dictionary", 'log_options')

        level = str(options_raw.get('level') or 'info').lower()
        if level not in LOG_LEVELS:
            raise ConfigError(
                f"Unknown log level '{level}', expected one of: {', '.join(sorted(LOG_LEVELS))}",
                'log_options.level'
            )

        return LogOptions(
            level=level,
            output_file=options_raw.get('output_file') or None,
            enable_console=cls._parse_bool(options_raw, 'enable_console', True),
        )

    @staticmethod
    def _parse_bool(config_dict: Dict[str, Any], key: str, default: bool) -> bool:
        value = config_dict.get(key, default)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ('true', 'yes', '1', 'on'):
                return True
            if lowered in ('false', 'no', '0', 'off', ''):
                return False
        raise ConfigError(f"Field '{key}' must be a boolean, got {value!r}", key)
