"""Batch orchestration across the repository pairs of one account.

The orchestrator selects repository pairs, runs the sync engine for each
one in order, isolates per-repository failures, aggregates a BatchSummary
and hands it to the reporter.
"""

import logging
from typing import List, Optional, Protocol

from src.config.identifiers import is_valid_repo_identifier, parse_repo_identifier
from src.config.models import Account, AppConfig, RepoPairConfig
from src.git_client.credentials import sanitize_credentials
from .engine import SyncEngine
from .models import BatchSummary, SyncOutcome, SyncStatus

logger = logging.getLogger(__name__)


class Reporter(Protocol):
    def report(self, config: AppConfig, summary: BatchSummary) -> None:
        ...


def select_repos(account: Account, repo_selector: Optional[str] = None) -> List[RepoPairConfig]:
    """Return the pairs whose upstream or fork identifier equals the selector.

    Without a selector every configured pair is returned.
    """
    if not repo_selector:
        return list(account.repos)
    return [
        pair for pair in account.repos
        if repo_selector in (pair.upstream, pair.fork)
    ]


class BatchOrchestrator:
    """Runs one batch: every selected repository pair of one account.

    Example:
        >>> orchestrator = BatchOrchestrator(config, SyncEngine(config), reporter)
        >>> summary = orchestrator.run(account, repo_selector="acme/widgets:main")
        >>> summary.synced_repos, summary.failed_repos
        (1, 0)
    """

    def __init__(
        self,
        config: AppConfig,
        engine: Optional[SyncEngine] = None,
        reporter: Optional[Reporter] = None,
    ):
        self.config = config
        self.engine = engine or SyncEngine(config)
        self.reporter = reporter

    def run(
        self,
        account: Account,
        repo_selector: Optional[str] = None,
        account_selector: Optional[str] = None,
    ) -> BatchSummary:
        """Sync the selected repository pairs of an account.

        Args:
            account: Account to process
            repo_selector: Only pairs whose upstream or fork identifier equals this
            account_selector: Skip the whole batch unless the account name equals this

        Returns:
            The completed BatchSummary
        """
        if account_selector and account_selector != account.name:
            logger.warning(f"Skipping account {account.name}: does not match filter '{account_selector}'")
            return BatchSummary.account_filter_mismatch(account.name, account_selector)

        logger.info(f"Processing account: {account.name}")
        summary = BatchSummary(account=account.name)

        pairs = select_repos(account, repo_selector)
        if not pairs:
            # Zero matches is not an error; the report check below still runs
            logger.warning(
                f"No repositories found matching filter: {repo_selector} for account: {account.name}"
            )

        for pair in pairs:
            summary.record(self._sync_pair(account, pair))

        summary.complete()
        self._report(summary)

        logger.info(
            f"Sync process completed for account {account.name}: "
            f"{summary.synced_repos} synced, {summary.failed_repos} failed, "
            f"{summary.skipped_repos} skipped"
        )
        return summary

    def _sync_pair(self, account: Account, pair: RepoPairConfig) -> SyncOutcome:
        try:
            return self.engine.sync(account, pair)
        except Exception as e:
            logger.exception(f"[{account.name}] Error processing repository {pair.fork}: {e}")
            repository = pair.fork
            if is_valid_repo_identifier(pair.fork):
                repository = parse_repo_identifier(pair.fork).full_name
            return SyncOutcome(
                repository=repository,
                account=account.name,
                success=False,
                status=SyncStatus.ERROR,
                error=sanitize_credentials(str(e)) or type(e).__name__,
            )

    def _report(self, summary: BatchSummary) -> None:
        if self.reporter is None:
            return

        if not (summary.synced_repos > 0 or summary.failed_repos > 0 or self.config.send_mail_on_failure):
            logger.debug("Nothing synced or failed, no report sent")
            return

        try:
            self.reporter.report(self.config, summary)
        except Exception as e:
            logger.error(f"Failed to send sync report: {e}")
