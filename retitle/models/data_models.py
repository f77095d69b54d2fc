"""
Core data models for the PDF title reconciliation tool.

This module contains the following dataclasses:
- IntakeFile: A (filename, bytes) pair supplied by file intake
- InputDocument: An input PDF with its original name and metadata title
- MatchCandidate: A reference name proposed by the fuzzy matcher
- ReconciliationRecord: The operator's decisions for one input document
- ReportRow: One row of the audit report
- BatchReport: The write-once audit view over all records
- FinalizedBatch: The packaged output of a finished session
- BatchSummary: Summary of the session results
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class IntakeFile:
    """A file collected at intake, before any metadata has been read."""
    name: str                         # Original filename, extension included
    content: bytes = field(repr=False)  # Raw file bytes


@dataclass(frozen=True)
class InputDocument:
    """An input PDF with its original name and embedded title."""
    raw_name: str                     # Original filename, extension included
    raw_title: str = ""               # Metadata title ("" if absent or unreadable)
    content: bytes = field(default=b"", repr=False)  # Original file bytes


@dataclass(frozen=True)
class MatchCandidate:
    """A reference name proposed for a document, with its similarity score."""
    reference_name: str               # Entry of the reference corpus
    score: int                        # Similarity (0-100)


@dataclass
class ReconciliationRecord:
    """Tracks the operator's decisions for a single input document."""
    source: InputDocument             # Document under review
    matches: List[MatchCandidate] = field(default_factory=list)  # Ranked proposals
    selected_reference_names: List[str] = field(default_factory=list)  # Chosen subset, insertion order
    final_name: str = ""              # Output filename without extension
    final_title: str = ""             # Output metadata title (mirrors final_name)
    confirmed: bool = False           # Operator committed the edit buffer
    failed: bool = False              # Metadata read/write failed
    failure_reason: str = ""          # Why the document failed
    output_content: Optional[bytes] = field(default=None, repr=False)  # Rewritten bytes

    def score_for(self, reference_name: str) -> Optional[int]:
        """Return the match score of ``reference_name``, or None if not matched."""
        for candidate in self.matches:
            if candidate.reference_name == reference_name:
                return candidate.score
        return None

    def mark_failed(self, reason: str) -> None:
        """Flag the record as failed and drop any rewritten content."""
        self.failed = True
        self.failure_reason = reason
        self.output_content = None


@dataclass(frozen=True)
class ReportRow:
    """One row of the audit report."""
    original_filename: str
    original_title: str
    new_filename: str
    selected_names: str               # ", "-joined selected reference names
    selected_scores: str              # ", "-joined "<int>%" scores
    failure_reason: str = ""

    def as_tuple(self) -> Tuple[str, str, str, str, str, str]:
        return (
            self.original_filename,
            self.original_title,
            self.new_filename,
            self.selected_names,
            self.selected_scores,
            self.failure_reason,
        )


@dataclass(frozen=True)
class BatchReport:
    """Write-once audit view built after every record is finalized."""
    rows: Tuple[ReportRow, ...]

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class FinalizedBatch:
    """Output artifacts of a finished reconciliation session."""
    report: BatchReport
    archive_bytes: bytes = field(repr=False)
    report_bytes: bytes = field(repr=False)
    archive_entries: Tuple[str, ...] = ()  # Filenames inside the archive, in order


@dataclass
class BatchSummary:
    """Summary of a reconciliation session returned by RetitleOrchestrator."""
    total_documents: int = 0          # Documents in the batch
    metadata_changes: int = 0         # Records whose title differs from the original
    filename_changes: int = 0         # Records whose filename differs from the original
    failed_documents: int = 0         # Records that failed read or write
    errors: List[str] = field(default_factory=list)  # All error messages
    archive_path: Optional[Path] = None  # Written zip archive
    report_path: Optional[Path] = None   # Written spreadsheet report
    duration: float = 0.0             # Session duration in seconds
    interrupted: bool = False         # Whether the operator quit before finishing
