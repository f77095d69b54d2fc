"""Terminal User Interface for reviewing proposed PDF names.

This module provides the ReviewTUI class, a Rich-based interactive TUI that
lets an operator walk through a batch, pick similar reference names, edit the
final filename and confirm it.

Example:
    from retitle.ui import ReviewTUI

    tui = ReviewTUI()
    tui.display_intake_summary(controller.records, reference_size=48, cutoff=60)
    completed = tui.review(controller)
    tui.display_summary(summary)
"""

from typing import TYPE_CHECKING, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from retitle.models import BatchSummary, ReconciliationRecord, SessionState

if TYPE_CHECKING:
    from retitle.orchestration.reconciliation_controller import ReconciliationController

ACTION_CHOICES = ["n", "p", "t", "e", "o", "m", "c", "q"]


class ReviewTUI:
    """Rich-based Terminal User Interface for the review workflow.

    Provides display and interaction methods for a reconciliation session:
    - Intake summary table with the best match of each document
    - Per-document review panel with navigation, selection and editing
    - Failure list and final summary

    Args:
        console: Optional Rich Console instance for output. Pass a Console
            writing to a StringIO to capture output in tests.

    Attributes:
        console: The Rich Console instance used for all output.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def display_intake_summary(
        self, records: List[ReconciliationRecord], reference_size: int, cutoff: int
    ) -> None:
        """Display the loaded batch and the best match of every document.

        Args:
            records: Records of the batch.
            reference_size: Number of names in the reference corpus.
            cutoff: Minimum match score in use.
        """
        failed = sum(1 for r in records if r.failed)
        header_text = (
            f"Files loaded: {len(records):,}\n"
            f"Files with errors: {failed:,}\n"
            f"Reference names: {reference_size:,}\n"
            f"Minimum score: {cutoff}%"
        )
        self.console.print(Panel(header_text, title="Intake Results", border_style="blue"))

        if not records:
            self.console.print("[yellow]No PDF files found.[/yellow]")
            return

        table = Table(title="Proposed Names")
        table.add_column("#", justify="right", style="cyan", no_wrap=True)
        table.add_column("Original Filename", style="white")
        table.add_column("Metadata Title", style="dim")
        table.add_column("Best Match", style="magenta")
        table.add_column("Score", justify="center")

        for idx, record in enumerate(records, start=1):
            if record.failed:
                best, score = "[red]error[/red]", ""
            elif record.matches:
                best = escape(record.matches[0].reference_name)
                score = self._format_score(record.matches[0].score)
            else:
                best, score = "[yellow]no match[/yellow]", ""
            table.add_row(
                str(idx),
                escape(self._truncate_name(record.source.raw_name)),
                escape(self._truncate_name(record.source.raw_title or "None")),
                best,
                score,
            )

        self.console.print(table)

    def display_failures(self, failures: List[Tuple[str, str]]) -> None:
        """Display the documents that could not be processed.

        Args:
            failures: ``(document name, reason)`` pairs.
        """
        if not failures:
            return
        error_text = "\n".join(f"- {escape(name)}: {escape(reason)}" for name, reason in failures)
        self.console.print(
            Panel(error_text, title=f"Files with errors ({len(failures)})", border_style="red")
        )

    def review(self, controller: "ReconciliationController") -> bool:
        """Run the interactive review loop until the last record is confirmed.

        Args:
            controller: Controller in the REVIEWING state.

        Returns:
            True once the session reaches FINALIZING, False if the operator
            quit or interrupted the review.
        """
        while controller.state is SessionState.REVIEWING:
            try:
                self.display_record(controller)
                action = self._prompt_action()

                if action == "q":
                    if Confirm.ask("Quit without saving?", default=False):
                        return False
                elif action == "n":
                    controller.next()
                elif action == "p":
                    controller.previous()
                elif action == "t":
                    self._toggle_match(controller)
                elif action == "e":
                    text = Prompt.ask("Final filename", default=controller.edit_buffer)
                    controller.set_edit_buffer(text)
                elif action == "o":
                    controller.use_original_name()
                elif action == "m":
                    if not controller.current_record.source.raw_title:
                        self.console.print("[yellow]This file has no metadata title.[/yellow]")
                    controller.use_metadata_title()
                elif action == "c":
                    controller.confirm()
                    if controller.state is SessionState.REVIEWING:
                        self.console.print(
                            f"[green]Confirmed:[/green] {escape(controller.current_record.final_name)}"
                        )

            except KeyboardInterrupt:
                self.console.print("\n[yellow]Review cancelled by user.[/yellow]")
                return False

        return controller.state is SessionState.FINALIZING

    def display_record(self, controller: "ReconciliationController") -> None:
        """Display the record under review with its matches and edit buffer."""
        record = controller.current_record
        total = len(controller.records)

        lines = [
            f"File {controller.current_index + 1} of {total}",
            f"Original Metadata Title: {escape(record.source.raw_title or 'None')}",
            f"Final Filename: [bold]{escape(controller.edit_buffer)}[/bold]",
        ]
        if record.confirmed:
            lines.append(f"[green]Confirmed as {escape(record.final_name)}[/green]")
        if record.failed:
            lines.append(f"[red]Error: {escape(record.failure_reason)}[/red]")

        self.console.print(
            Panel("\n".join(lines), title=f"Current File: {escape(record.source.raw_name)}", border_style="blue")
        )

        if record.matches:
            table = Table(title="Select Similar Filenames", show_header=True, header_style="bold")
            table.add_column("#", justify="right", style="cyan", width=3)
            table.add_column("Selected", justify="center", width=8)
            table.add_column("Reference Name", style="white")
            table.add_column("Score", justify="right")
            for idx, candidate in enumerate(record.matches, start=1):
                marker = "[green]x[/green]" if candidate.reference_name in record.selected_reference_names else ""
                table.add_row(
                    str(idx),
                    marker,
                    escape(candidate.reference_name),
                    f"{self._format_score(candidate.score)} match",
                )
            self.console.print(table)
        elif not record.failed:
            self.console.print("[yellow]No similar filenames found in master list.[/yellow]")

        confirm_label = "download files and report" if controller.is_last else "confirm"
        self.console.print(
            f"[dim](n)ext (p)rev (t)oggle match (e)dit name (o)riginal name "
            f"(m)etadata title (c) {confirm_label} (q)uit[/dim]"
        )

    def display_batch_error(self, message: str) -> None:
        """Display a batch-level error that prevented packaging the output."""
        self.console.print(
            Panel(
                f"{escape(message)}\n\nReview the last file and confirm again to retry.",
                title="Output failed",
                border_style="red",
            )
        )

    def display_summary(self, summary: BatchSummary) -> None:
        """Display final statistics of the session.

        Args:
            summary: BatchSummary with aggregated statistics.
        """
        title = "Processing Complete!"
        if summary.interrupted:
            title = "Processing Cancelled"
        self.console.print(Panel(title, border_style="yellow" if summary.interrupted else "green"))

        table = Table(show_header=True, header_style="bold")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")

        table.add_row("Total files processed", f"{summary.total_documents:,}")
        table.add_row("Files with metadata changes", f"{summary.metadata_changes:,}")
        table.add_row("Files with filename changes", f"{summary.filename_changes:,}")
        table.add_row("Files with errors", f"{summary.failed_documents:,}")
        if summary.archive_path is not None:
            table.add_row("Archive", str(summary.archive_path))
        if summary.report_path is not None:
            table.add_row("Report", str(summary.report_path))
        table.add_row("Duration", self._format_duration(summary.duration))

        self.console.print(table)

        if summary.errors:
            self._display_errors(summary.errors)

    def _toggle_match(self, controller: "ReconciliationController") -> None:
        """Prompt for a match number and toggle it."""
        matches = controller.current_record.matches
        if not matches:
            self.console.print("[yellow]No similar filenames to select.[/yellow]")
            return

        choices = [str(i) for i in range(1, len(matches) + 1)]
        selection = Prompt.ask("Match number", choices=choices)
        controller.toggle_reference(matches[int(selection) - 1].reference_name)

    def _prompt_action(self) -> str:
        """Prompt for the next action on the current record."""
        return Prompt.ask("Action", choices=ACTION_CHOICES, default="c", show_choices=False)

    def _display_errors(self, errors: List[str]) -> None:
        """Display error messages in a separate panel, ten at most."""
        max_display = 10
        displayed_errors = errors[:max_display]
        remaining = len(errors) - max_display

        error_text = "\n".join(f"- {escape(e)}" for e in displayed_errors)
        if remaining > 0:
            error_text += f"\n\n... and {remaining} more errors"

        self.console.print(Panel(error_text, title=f"Errors ({len(errors)})", border_style="red"))

    def _format_score(self, score: int) -> str:
        """Format a score with color coding."""
        if score >= 90:
            return f"[green]{score}%[/green]"
        elif score >= 70:
            return f"[yellow]{score}%[/yellow]"
        else:
            return f"[red]{score}%[/red]"

    def _format_duration(self, seconds: float) -> str:
        if seconds < 0:
            seconds = 0
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"

    def _truncate_name(self, name: str, max_length: int = 50) -> str:
        if len(name) > max_length:
            return name[: max_length - 3] + "..."
        return name
