"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output:
status messages with color coding, verbosity control, and the per-account
batch summary table.
"""

from rich.console import Console
from rich.table import Table

from src.sync_engine.models import BatchStatus, BatchSummary, SyncStatus, TestsStatus

STATUS_STYLES = {
    SyncStatus.SYNCED: "green",
    SyncStatus.SKIPPED: "dim",
    SyncStatus.ERROR: "red",
}


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Operation completed")
        >>> handler.print_batch_summary(summary)
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def print(self, message: str) -> None:
        self.console.print(message)

    def print_batch_summary(self, summary: BatchSummary) -> None:
        """Display one account's batch result.

        Args:
            summary: Completed batch summary
        """
        if summary.status is BatchStatus.ACCOUNT_FILTER_MISMATCH:
            self.console.print(f"[dim]Account {summary.account} skipped: {summary.message}[/dim]")
            return

        self.console.print(f"\n[bold]Sync Summary ({summary.account}):[/bold]")

        if summary.outcomes:
            table = Table(show_header=True, header_style="bold")
            table.add_column("Repository")
            table.add_column("Status")
            table.add_column("Conflicts")
            table.add_column("Tests")
            table.add_column("Details", overflow="fold")

            for outcome in summary.outcomes:
                style = STATUS_STYLES[outcome.status]
                details = outcome.error or outcome.message or ""
                if outcome.requires_manual_intervention:
                    details = f"[bold red]MANUAL INTERVENTION REQUIRED[/bold red] {details}"
                conflicts = ""
                if outcome.had_conflicts:
                    conflicts = "resolved by LLM" if outcome.success else "unresolved"
                tests = "" if outcome.tests_status is TestsStatus.ABSENT else outcome.tests_status.value
                table.add_row(
                    outcome.repository,
                    f"[{style}]{outcome.status.value}[/{style}]",
                    conflicts,
                    tests,
                    details,
                )
            self.console.print(table)
        else:
            self.console.print("  [yellow]No repositories matched[/yellow]")

        self.console.print(f"  [green]↑[/green] Synced: {summary.synced_repos}")
        self.console.print(f"  [dim]─[/dim] Skipped: {summary.skipped_repos}")
        if summary.failed_repos > 0:
            self.console.print(f"  [red]✗[/red] Failed: {summary.failed_repos}")

        if not summary.success:
            self.console.print("\n[red]Sync completed with failures[/red]")
        elif summary.synced_repos == 0:
            self.console.print("\n[green]Already in sync. No upstream changes.[/green]")
        else:
            self.console.print("\n[green]Sync completed successfully[/green]")
