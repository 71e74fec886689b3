"""Data models for fork-sync configuration.

All models are plain dataclasses produced by ConfigLoader after validation;
nothing downstream re-validates them.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from src.config.identifiers import RepoRef, parse_repo_identifier

DEFAULT_LLM_BASE_URL = "https://api.openai.com/v1"


@dataclass(frozen=True)
class RepoPairConfig:
    """A fork and the upstream repository it follows.

    Attributes:
        upstream: Upstream identifier "owner/repo:branch"
        fork: Fork identifier "owner/repo:branch"
    """
    upstream: str
    fork: str

    @property
    def upstream_ref(self) -> RepoRef:
        return parse_repo_identifier(self.upstream)

    @property
    def fork_ref(self) -> RepoRef:
        return parse_repo_identifier(self.fork)


@dataclass
class Account:
    """A git hosting account and the repositories it maintains.

    Attributes:
        name: Account name, used for filtering and working directory names
        token: Access token used for cloning and pushing forks
        repos: Repository pairs processed in order
    """
    name: str
    token: str
    repos: List[RepoPairConfig] = field(default_factory=list)


@dataclass
class LLMConfig:
    """Settings for the chat-completion service used to resolve conflicts.

    Attributes:
        provider: Provider name (informational, "openai" compatible API)
        model: Model name sent with each request
        api_key: Bearer token for the service
        base_url: API root, the request goes to {base_url}/chat/completions
        max_retries: Retries on rate limits and transient failures
        timeout: Per-request timeout in seconds
        max_tokens: Response token limit
        temperature: Sampling temperature
    """
    api_key: str
    provider: str = "openai"
    model: str = "gpt-4"
    base_url: str = DEFAULT_LLM_BASE_URL
    max_retries: int = 3
    timeout: int = 120
    max_tokens: int = 4000
    temperature: float = 0.2


@dataclass
class EmailConfig:
    """SMTP settings for sync reports.

    Attributes:
        smtp_host: SMTP server host
        smtp_port: SMTP server port
        from_address: Sender address
        to: Recipient addresses
        user: Login user (no login when None)
        password: Login password
        use_tls: Issue STARTTLS before login
    """
    smtp_host: str
    smtp_port: int
    from_address: str
    to: List[str]
    user: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True


@dataclass
class LogOptions:
    """Logging options.

    Attributes:
        level: Log level name (debug, info, warning, error)
        output_file: Append log records to this file when set
        enable_console: Log to stderr
    """
    level: str = "info"
    output_file: Optional[str] = None
    enable_console: bool = True


@dataclass
class AppConfig:
    """Complete fork-sync configuration.

    Attributes:
        accounts: Accounts to process, in file order
        llm: Conflict resolution service settings
        repos_base_dir: Directory holding all working copies
        schedule: Cron expression for scheduled runs
        run_tests_after_merge: Run the project's tests after a successful sync
        test_command: Shell command overriding `npm install && npm test`
        send_mail_on_failure: Send a report even when nothing was synced or failed
        send_daily_report: Mail the day's log lines once a day
        git_host: Host used to build remote URLs
        git_user_name: Committer name for merge commits
        git_user_email: Committer email for merge commits
        email: SMTP settings, reporting is disabled when None
        log_options: Logging options
    """
    accounts: List[Account]
    llm: LLMConfig
    repos_base_dir: str = "./repositories"
    schedule: str = "0 4 * * *"
    run_tests_after_merge: bool = False
    test_command: Optional[str] = None
    send_mail_on_failure: bool = False
    send_daily_report: bool = False
    git_host: str = "github.com"
    git_user_name: str = "fork-sync"
    git_user_email: str = "fork-sync@localhost"
    email: Optional[EmailConfig] = None
    log_options: LogOptions = field(default_factory=LogOptions)

    def find_account(self, name: str) -> Optional[Account]:
        for account in self.accounts:
            if account.name == name:
                return account
        return None
