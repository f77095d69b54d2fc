"""
PDF Title Reconciliation Tool - CLI Interface.

A command-line interface for renaming and re-titling batches of PDF files.
Each file's name is matched against a reference list of known document names,
an operator confirms the final name, and the tool writes a zip archive of the
renamed PDFs together with a spreadsheet report.

Usage Examples:
    # Preview proposed matches (read-only)
    retitle match /path/to/pdfs

    # Use a custom master list and a stricter cutoff
    retitle match /path/to/pdfs --reference master_list.txt --cutoff 75

    # Interactive review, outputs written to ./out
    retitle review /path/to/pdfs --output-dir out

    # Review with a session log and verbose output
    retitle review a.pdf b.pdf --log-file session.log --verbose
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from retitle.matching import DEFAULT_CUTOFF, DEFAULT_LIMIT
from retitle.orchestration import RetitleOrchestrator

__version__ = "0.1.0"

# Initialize Typer app
app = typer.Typer(
    name="retitle",
    help="PDF Title Reconciliation Tool - Rename and re-title PDFs against a master list.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for consistent output formatting
console = Console()


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"PDF Title Reconciliation Tool v{__version__}")
        raise typer.Exit()


def validate_input_paths(paths: List[Path]) -> None:
    """
    Validate that every input path exists.

    Args:
        paths: Files and directories given on the command line.

    Raises:
        typer.Exit: If a path does not exist.
    """
    for path in paths:
        if not path.exists():
            console.print(f"[red]Error:[/red] Input path does not exist: {path}")
            raise typer.Exit(1)


def validate_cutoff(value: int) -> int:
    """
    Validate the minimum match score.

    Raises:
        typer.BadParameter: If value is out of range.
    """
    if not 0 <= value <= 100:
        raise typer.BadParameter("Cutoff must be between 0 and 100")
    return value


def validate_limit(value: int) -> int:
    """
    Validate the number of matches per file.

    Raises:
        typer.BadParameter: If value is below 1.
    """
    if value < 1:
        raise typer.BadParameter("Limit must be at least 1")
    return value


def configure_logging(verbose: bool) -> None:
    """Route library log records to the console when running verbose."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """PDF Title Reconciliation Tool - Rename and re-title PDFs against a master list."""
    pass


@app.command()
def match(
    paths: List[Path] = typer.Argument(
        ...,
        help="PDF files or directories containing PDF files.",
    ),
    reference: Optional[Path] = typer.Option(
        None,
        "--reference",
        "-r",
        help="Master list of known document names (one per line, or CSV first column).",
    ),
    limit: int = typer.Option(
        DEFAULT_LIMIT,
        "--limit",
        "-k",
        help="Maximum number of similar names shown per file.",
        callback=validate_limit,
    ),
    cutoff: int = typer.Option(
        DEFAULT_CUTOFF,
        "--cutoff",
        "-c",
        help="Minimum similarity score for a match (0-100).",
        callback=validate_cutoff,
    ),
    recursive: bool = typer.Option(
        False,
        "--recursive",
        "-R",
        help="Search directories recursively.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
) -> None:
    """
    Show proposed names and similar reference names without writing any PDF.
    """
    validate_input_paths(paths)
    configure_logging(verbose)

    try:
        orchestrator = RetitleOrchestrator(
            input_paths=paths,
            reference_path=reference,
            limit=limit,
            cutoff=cutoff,
            log_file_path=log_file,
            recursive=recursive,
            verbose=verbose,
            write_log=log_file is not None,
        )

        records = orchestrator.match()

        if records:
            matched = sum(1 for r in records if r.matches)
            console.print(
                f"\n[green]{matched} of {len(records)} file(s) have similar names "
                f"above {cutoff}%.[/green]"
            )
        else:
            console.print("\n[yellow]No PDF files found.[/yellow]")

        if log_file:
            console.print(f"[dim]Log written to: {log_file}[/dim]")

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def review(
    paths: List[Path] = typer.Argument(
        ...,
        help="PDF files or directories containing PDF files.",
    ),
    reference: Optional[Path] = typer.Option(
        None,
        "--reference",
        "-r",
        help="Master list of known document names (one per line, or CSV first column).",
    ),
    output_dir: Path = typer.Option(
        Path("."),
        "--output-dir",
        "-o",
        help="Directory for the zip archive and the report.",
    ),
    limit: int = typer.Option(
        DEFAULT_LIMIT,
        "--limit",
        "-k",
        help="Maximum number of similar names shown per file.",
        callback=validate_limit,
    ),
    cutoff: int = typer.Option(
        DEFAULT_CUTOFF,
        "--cutoff",
        "-c",
        help="Minimum similarity score for a match (0-100).",
        callback=validate_cutoff,
    ),
    recursive: bool = typer.Option(
        False,
        "--recursive",
        "-R",
        help="Search directories recursively.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for log file output.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
) -> None:
    """
    Interactive review workflow.

    1. Intake: Read the title of every PDF and find similar reference names
    2. Review: Select similar names and confirm the final filename of each PDF
    3. Output: Write the renamed PDFs to a zip archive and the report to a spreadsheet
    4. Summary: Display results and statistics
    """
    validate_input_paths(paths)
    configure_logging(verbose)

    try:
        orchestrator = RetitleOrchestrator(
            input_paths=paths,
            reference_path=reference,
            output_dir=output_dir,
            limit=limit,
            cutoff=cutoff,
            log_file_path=log_file,
            recursive=recursive,
            verbose=verbose,
        )

        summary = orchestrator.review()

        if summary.total_documents == 0:
            console.print("\n[yellow]No PDF files found.[/yellow]")
            return

        if summary.interrupted:
            raise typer.Exit(130)

        if summary.errors:
            console.print(f"\n[yellow]Completed with {len(summary.errors)} error(s).[/yellow]")

        if summary.archive_path is None or summary.report_path is None:
            raise typer.Exit(1)

    except KeyboardInterrupt:
        console.print("\n[yellow]Review interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
