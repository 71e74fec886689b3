"""Sync command orchestration for CLI.

This module provides the SyncCommand class that loads the configuration,
builds the sync collaborators, runs one batch per account under the run
lock, prints summaries and maps the result to an exit code. Without
--run-once the same batch runs on the configured cron schedule.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional

from src.cli.errors import AccountNotFoundError, CLIError, ConfigNotFoundError
from src.cli.logging_config import apply_log_options
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.config.config_loader import ConfigLoader
from src.config.errors import ConfigurationError
from src.config.models import AppConfig
from src.reporting.errors import ReportError
from src.reporting.mailer import EmailReporter
from src.scheduler.scheduler import Scheduler, SchedulerError
from src.sync_engine.engine import SyncEngine
from src.sync_engine.models import BatchStatus, BatchSummary
from src.sync_engine.orchestrator import BatchOrchestrator
from src.sync_engine.run_lock import RunInProgressError, RunLock

logger = logging.getLogger(__name__)


class SyncCommand:
    """Runs fork synchronization from the command line.

    The workflow:
        1. Load configuration (YAML or JSON) and apply its log options
        2. Build the sync engine, orchestrator and (if email is configured) reporter
        3. Take the run lock and run one batch per account
        4. Print a summary per account and return the exit code

    Example:
        >>> output = OutputHandler(verbosity=1)
        >>> sync_cmd = SyncCommand(config_path="config.yaml", output_handler=output)
        >>> exit_code = sync_cmd.run(run_once=True)
        >>> sys.exit(exit_code)
    """

    def __init__(
        self,
        config_path: str = "./config.yaml",
        output_handler: Optional[OutputHandler] = None,
        engine_factory: Callable[[AppConfig], SyncEngine] = SyncEngine,
        reporter_factory: Callable[[AppConfig], EmailReporter] = EmailReporter,
        scheduler_factory: Callable[..., Scheduler] = Scheduler,
    ):
        """Initialize sync command with dependencies.

        Args:
            config_path: Path to configuration file
            output_handler: OutputHandler for terminal output (optional)
            engine_factory: Builds the sync engine from the configuration
            reporter_factory: Builds the email reporter from the configuration
            scheduler_factory: Builds the scheduler for non --run-once mode
        """
        self.config_path = config_path
        self.output_handler = output_handler or OutputHandler()
        self.engine_factory = engine_factory
        self.reporter_factory = reporter_factory
        self.scheduler_factory = scheduler_factory

    def load_config(self) -> AppConfig:
        """Load the configuration file.

        Raises:
            ConfigNotFoundError: If the file does not exist
            ConfigurationError: If the file is unreadable or invalid
        """
        if not Path(self.config_path).exists():
            raise ConfigNotFoundError(self.config_path)

        logger.info(f"Loading configuration from {self.config_path}")
        config = ConfigLoader.load(self.config_path)
        logger.info(f"Loaded config with {len(config.accounts)} account(s)")
        return config

    def run(
        self,
        run_once: bool = False,
        account_selector: Optional[str] = None,
        repo_selector: Optional[str] = None,
    ) -> ExitCode:
        """Execute a single batch or start the scheduler.

        Args:
            run_once: Run one batch and exit instead of scheduling
            account_selector: Only process the account with this name
            repo_selector: Only process pairs whose upstream or fork equals this

        Returns:
            ExitCode indicating success or specific failure type
        """
        try:
            config = self.load_config()
            apply_log_options(config.log_options, self.output_handler.verbosity)

            if account_selector and config.find_account(account_selector) is None:
                raise AccountNotFoundError(account_selector)

            if run_once:
                summaries = self.run_batches(config, account_selector, repo_selector)
                return self._exit_code(summaries)

            return self._run_scheduled(config, account_selector, repo_selector)

        except ConfigNotFoundError as e:
            logger.error(str(e))
            self.output_handler.error(str(e))
            self.output_handler.print("Create one from config.example.yaml or pass --config <path>")
            return ExitCode.GENERAL_ERROR

        except AccountNotFoundError as e:
            logger.error(str(e))
            self.output_handler.error(str(e))
            return ExitCode.ACCOUNT_NOT_FOUND

        except RunInProgressError as e:
            logger.error(str(e))
            self.output_handler.error(str(e))
            return ExitCode.RUN_IN_PROGRESS

        except ConfigurationError as e:
            logger.error(f"Configuration error: {e}")
            self.output_handler.error(f"Configuration error: {e}")
            return ExitCode.GENERAL_ERROR

        except (SchedulerError, ReportError, CLIError) as e:
            logger.error(f"Error: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception("Unexpected error during sync")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

    def run_batches(
        self,
        config: AppConfig,
        account_selector: Optional[str] = None,
        repo_selector: Optional[str] = None,
    ) -> List[BatchSummary]:
        """Run one batch per account while holding the run lock.

        Raises:
            RunInProgressError: If another run holds the lock
        """
        orchestrator = BatchOrchestrator(
            config,
            engine=self.engine_factory(config),
            reporter=self._build_reporter(config),
        )

        summaries = []
        with RunLock(config.repos_base_dir):
            logger.info("Starting fork sync process")
            for account in config.accounts:
                summary = orchestrator.run(
                    account,
                    repo_selector=repo_selector,
                    account_selector=account_selector,
                )
                if summary.status is BatchStatus.ACCOUNT_FILTER_MISMATCH:
                    logger.debug(summary.message)
                    continue
                self.output_handler.print_batch_summary(summary)
                summaries.append(summary)

        return summaries

    def _build_reporter(self, config: AppConfig) -> Optional[EmailReporter]:
        if config.email is None:
            return None
        return self.reporter_factory(config)

    def _run_scheduled(
        self,
        config: AppConfig,
        account_selector: Optional[str],
        repo_selector: Optional[str],
    ) -> ExitCode:
        def sync_job() -> None:
            try:
                self.run_batches(config, account_selector, repo_selector)
            except RunInProgressError as e:
                logger.warning(f"Skipping scheduled run: {e}")

        reporter = self._build_reporter(config)
        report_job = None
        if reporter is not None and config.send_daily_report:
            report_job = reporter.send_daily_report

        scheduler = self.scheduler_factory(config, sync_job, report_job)
        self.output_handler.success(
            f"Scheduler started with expression '{config.schedule}'. Press Ctrl+C to stop"
        )

        try:
            scheduler.run_forever()
        except KeyboardInterrupt:
            scheduler.stop()
            self.output_handler.print("Scheduler stopped")

        return ExitCode.SUCCESS

    @staticmethod
    def _exit_code(summaries: List[BatchSummary]) -> ExitCode:
        if any(not summary.success for summary in summaries):
            return ExitCode.SYNC_FAILED
        return ExitCode.SUCCESS
