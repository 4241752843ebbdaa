"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output:
colored status lines, spinners, run summaries and the page tree. Supports
verbosity levels and the --no-color flag.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner
from rich.tree import Tree

from src.cli.models import PushSummary
from src.models.mounting_point import MountingPoint
from src.models.page import Page
from src.sync.ledger import ResourceStatus, Status, SyncReport


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Site pushed")
        >>> with handler.spinner("Reading site..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        self.verbosity = verbosity
        self.console = Console(
            force_terminal=not no_color,
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

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{message}[/dim]")

    def print(self, message: str) -> None:
        self.console.print(message)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display a spinner while a single operation runs."""
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10):
            yield

    def report_status(self, resource_status: ResourceStatus) -> None:
        """Print one resource status as it is recorded (SyncReport listener).

        Errors are always printed; successes and skips need verbosity >= 1.
        """
        locale = f" [{resource_status.locale}]" if resource_status.locale else ""
        label = f"{resource_status.kind} {resource_status.identifier}{locale}"

        if resource_status.status is Status.ERROR:
            self.error(f"{label}: {resource_status.operation} failed: {resource_status.message}")
        elif resource_status.status is Status.BLOCKED:
            self.error(f"{label}: blocked ({resource_status.message})")
        elif resource_status.status is Status.SKIPPED:
            self.info(f"[yellow]⊘[/yellow] {label}: skipped ({resource_status.message})")
        else:
            self.info(f"[green]✓[/green] {label}: {resource_status.operation}")

    def print_push_summary(self, report: SyncReport) -> None:
        """Display push summary with color coding."""
        summary = PushSummary.from_report(report)
        self.console.print("\n[bold]Push Summary:[/bold]")

        if summary.created_count > 0:
            self.console.print(f"  [green]+[/green] Created: {summary.created_count}")
        if summary.updated_count > 0:
            self.console.print(f"  [blue]↑[/blue] Updated: {summary.updated_count}")
        if summary.skipped_count > 0:
            self.console.print(f"  [yellow]⊘[/yellow] Skipped: {summary.skipped_count}")
        if summary.error_count > 0:
            self.console.print(f"  [red]✗[/red] Failed: {summary.error_count}")
        if summary.blocked_count > 0:
            self.console.print(f"  [red]⊗[/red] Blocked: {summary.blocked_count}")

        for locale, fullpaths in sorted(report.unsynced.items()):
            self.console.print(
                f"  [red]![/red] Not pushed in {locale} (layout cycle or broken inheritance): "
                f"{', '.join(fullpaths)}"
            )

        if summary.has_failures:
            self.console.print("\n[red]Push completed with errors[/red]")
        else:
            self.console.print("\n[green]Push completed successfully[/green]")

    def print_pull_summary(self, mounting_point: MountingPoint, written: List[str], failed_assets: List[str]) -> None:
        """Display pull summary with color coding."""
        self.console.print("\n[bold]Pull Summary:[/bold]")
        self.console.print(f"  [blue]↓[/blue] Pages: {len(mounting_point.pages)}")
        self.console.print(f"  [blue]↓[/blue] Snippets: {len(mounting_point.snippets)}")
        if mounting_point.content_types:
            self.console.print(f"  [blue]↓[/blue] Content types: {len(mounting_point.content_types)}")
        if mounting_point.translations:
            self.console.print(f"  [blue]↓[/blue] Translations: {len(mounting_point.translations)}")
        self.console.print(f"  [dim]─[/dim] Files written: {len(written)}")

        for url in failed_assets:
            self.console.print(f"  [red]✗[/red] Asset not downloaded: {url}")

        if failed_assets:
            self.console.print("\n[red]Pull completed with errors[/red]")
        else:
            self.console.print("\n[green]Pull completed successfully[/green]")

    def print_tree(self, mounting_point: MountingPoint, locale: Optional[str] = None) -> None:
        """Render the page tree (and orphans) of a mounting point."""
        locale = locale or mounting_point.default_locale
        root = Tree(f"[bold]{mounting_point.site.name}[/bold] ({locale})")

        for page in (mounting_point.index, mounting_point.not_found):
            if page is not None:
                self._add_branch(root, page, locale)

        if mounting_point.orphans:
            orphans = root.add("[red]orphans[/red]")
            for page in mounting_point.orphans:
                orphans.add(f"[red]{page.fullpath}[/red]")

        self.console.print(root)

    def _add_branch(self, tree: Tree, page: Page, locale: str) -> None:
        if page.is_translated_in(locale):
            label = f"{page.localized_fullpath(locale)} [dim]({page.position})[/dim]"
        else:
            label = f"[dim]{page.fullpath} (not translated)[/dim]"
        if page.layout:
            label += f" [cyan]layout: {page.layout}[/cyan]"

        branch = tree.add(label)
        for child in page.children:
            self._add_branch(branch, child, locale)
