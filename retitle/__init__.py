"""retitle - PDF Title Reconciliation Tool.

A Python application for renaming and re-titling batches of PDF files by
reconciling their names against a reference list of known document names
using fuzzy matching and operator review.
"""

__version__ = "0.1.0"

from .models import (
    BatchReport,
    BatchSummary,
    FinalizedBatch,
    InputDocument,
    IntakeFile,
    MatchCandidate,
    ReconciliationRecord,
    ReportRow,
    SessionState,
)

__all__ = [
    "__version__",
    "SessionState",
    "IntakeFile",
    "InputDocument",
    "MatchCandidate",
    "ReconciliationRecord",
    "ReportRow",
    "BatchReport",
    "FinalizedBatch",
    "BatchSummary",
]


def main() -> None:
    """Entry point for the retitle CLI application.

    Imports and runs the Typer app from the retitle.cli module.
    """
    from retitle.cli import app
    app()
