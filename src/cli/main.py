"""Main CLI entry point for the fork-sync command.

This module provides the Typer application that serves as the entry point
for the fork-sync command-line tool. It uses options on the main command
rather than subcommands.
"""

import logging
from typing import Optional

import typer

from src.cli.logging_config import configure_logging
from src.cli.output import OutputHandler
from src.cli.sync_command import SyncCommand

app = typer.Typer(
    name="fork-sync",
    help="""Keep forks in sync with their upstream repositories.

QUICK START:
  fork-sync --run-once                              # Sync every configured fork now
  fork-sync                                         # Sync on the configured cron schedule
  fork-sync -r --account acme                       # Only one account
  fork-sync -r --repository acme/widgets:main       # Only one repository pair""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

logger = logging.getLogger(__name__)


@app.command()
def main_command(
    config: str = typer.Option(
        "./config.yaml",
        "--config",
        "-c",
        help="Path to the configuration file (YAML or JSON)",
        metavar="PATH",
    ),
    run_once: bool = typer.Option(
        False,
        "--run-once",
        "-r",
        help="Run one sync and exit instead of starting the scheduler",
    ),
    account: Optional[str] = typer.Option(
        None,
        "--account",
        "-a",
        help="Only sync the account with this name",
    ),
    repository: Optional[str] = typer.Option(
        None,
        "--repository",
        "-p",
        help="Only sync the pair whose upstream or fork equals this owner/repo:branch",
        metavar="OWNER/REPO:BRANCH",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Keep forks in sync with their upstream repositories.

    \b
    Upstream commits are merged into each fork branch and pushed. Merge
    conflicts are resolved with an LLM; when that fails the merge is
    rolled back and reported.
    """
    if version:
        typer.echo("fork-sync version 0.1.0")
        raise typer.Exit()

    configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    sync_cmd = SyncCommand(config_path=config, output_handler=output)
    exit_code = sync_cmd.run(
        run_once=run_once,
        account_selector=account,
        repo_selector=repository,
    )

    raise typer.Exit(exit_code)


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
