"""SessionLogger for writing a structured log of a reconciliation session.

This module provides the SessionLogger class that writes a sectioned,
human-readable session log: header, intake phase, review decisions, output
artifacts and summary.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, TextIO, Tuple

from retitle.models import BatchSummary, ReconciliationRecord


class SessionLogger:
    """Logger for reconciliation sessions with a structured output format.

    Usage:
        with SessionLogger() as session_log:
            session_log.log_header()
            session_log.log_intake_phase(inputs, reference_size, limit, cutoff, records, errors)
            session_log.log_review_phase(records)
            session_log.log_output(archive_path, report_path, archive_entries)
            session_log.log_summary(summary)

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
    """

    SEPARATOR = "=" * 65

    def __init__(self, log_file_path: Optional[Path] = None, mode: str = "REVIEW") -> None:
        """Initialize the SessionLogger.

        Args:
            log_file_path: Optional path for the log file. If not provided,
                generates a timestamped filename in the current directory.
            mode: Session mode shown in the header ("MATCH ONLY" or "REVIEW").

        Raises:
            OSError: If the log file path is not writable.
        """
        self._mode = mode
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
            self._log_file_path = Path.cwd() / f"retitle_log_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        """Validate that the log file's parent directory exists and is a directory.

        Raises:
            OSError: If the parent directory doesn't exist or is not a directory.
        """
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")

    def __enter__(self) -> "SessionLogger":
        """Open the log file.

        Raises:
            OSError: If the file cannot be opened for writing.
        """
        try:
            self._file_handle = open(self._log_file_path, "w", encoding="utf-8")
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close the log file, even if an exception occurred."""
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                print(f"Warning: Error closing log file: {e}", file=sys.stderr)
            finally:
                self._file_handle = None

    def get_log_path(self) -> Path:
        """Get the path to the log file."""
        return self._log_file_path

    def log_header(self) -> None:
        """Write the title, timestamp and mode."""
        self._write_separator()
        self._write_line("PDF Title Reconciliation - Session Log")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        self._write_line(f"Mode: {self._mode}")
        self._write_line("")

    def log_intake_phase(
        self,
        inputs: List[Path],
        reference_size: int,
        limit: int,
        cutoff: int,
        records: List[ReconciliationRecord],
        intake_errors: List[str],
    ) -> None:
        """Write the intake phase: inputs, matching policy and proposed matches.

        Args:
            inputs: Paths given on the command line.
            reference_size: Number of names in the reference corpus.
            limit: Maximum matches per document.
            cutoff: Minimum match score.
            records: Records created for the batch.
            intake_errors: Errors raised while collecting files.
        """
        self._write_separator()
        self._write_line("INTAKE PHASE")
        self._write_separator()
        for path in inputs:
            self._write_line(f"Input: {path}")
        self._write_line(f"Reference names: {reference_size}")
        self._write_line(f"Match limit: {limit}")
        self._write_line(f"Minimum score: {cutoff}%")
        self._write_line(f"Documents loaded: {len(records)}")
        self._write_line(f"Documents failed: {sum(1 for r in records if r.failed)}")
        self._write_line("")

        for i, record in enumerate(records, start=1):
            self._write_line(f"Document {i}: {record.source.raw_name}")
            if record.failed:
                self._write_line(f"! Failed: {record.failure_reason}", indent=2)
            else:
                self._write_line(f"Metadata title: {record.source.raw_title or 'None'}", indent=2)
                if not record.matches:
                    self._write_line("No similar names found", indent=2)
                for candidate in record.matches:
                    self._write_line(f"- {candidate.reference_name} ({candidate.score}%)", indent=4)
            self._write_line("")

        if intake_errors:
            self._write_line("Intake errors:")
            for error in intake_errors:
                self._write_line(f"- {error}", indent=2)
            self._write_line("")

    def log_review_phase(self, records: List[ReconciliationRecord]) -> None:
        """Write the operator's decision for every record.

        Args:
            records: Finalized records.
        """
        self._write_separator()
        self._write_line("REVIEW PHASE")
        self._write_separator()
        for i, record in enumerate(records, start=1):
            status = "confirmed" if record.confirmed else "default"
            self._write_line(f"Document {i}: {record.source.raw_name}")
            if record.failed:
                self._write_line(f"! Failed: {record.failure_reason}", indent=2)
            else:
                self._write_line(f"New name: {record.final_name} ({status})", indent=2)
            if record.selected_reference_names:
                self._write_line("Selected similar files:", indent=2)
                for name in record.selected_reference_names:
                    self._write_line(f"- {name} ({record.score_for(name)}%)", indent=4)
        self._write_line("")

    def log_output(
        self,
        archive_path: Optional[Path],
        report_path: Optional[Path],
        archive_entries: Tuple[str, ...],
    ) -> None:
        """Write the location and contents of the output artifacts."""
        self._write_separator()
        self._write_line("OUTPUT")
        self._write_separator()
        self._write_line(f"[{self._format_timestamp(datetime.now())}] Output written")
        self._write_line(f"Archive: {archive_path}")
        for name in archive_entries:
            self._write_line(f"- {name}", indent=2)
        self._write_line(f"Report: {report_path}")
        self._write_line("")

    def log_summary(self, summary: BatchSummary) -> None:
        """Write the summary section.

        Args:
            summary: The BatchSummary with aggregated statistics.
        """
        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()
        self._write_line(f"Total files processed: {summary.total_documents}")
        self._write_line(f"Files with metadata changes: {summary.metadata_changes}")
        self._write_line(f"Files with filename changes: {summary.filename_changes}")
        self._write_line(f"Files with errors: {summary.failed_documents}")
        if summary.interrupted:
            self._write_line("Session interrupted before completion")

        if summary.errors:
            self._write_line(f"Total errors: {len(summary.errors)}")
            self._write_line("Errors:")
            for error in summary.errors:
                self._write_line(f"- {error}", indent=2)

        self._write_line(f"Duration: {self._format_duration(summary.duration)}")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def _format_duration(self, seconds: float) -> str:
        """Format a duration like "45s", "5m 23s" or "1h 5m 30s"."""
        total_seconds = int(seconds)

        if total_seconds < 60:
            return f"{total_seconds}s"

        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        secs = total_seconds % 60

        if hours > 0:
            return f"{hours}h {minutes}m {secs}s"
        return f"{minutes}m {secs}s"

    def _format_timestamp(self, dt: datetime) -> str:
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line to the log file with optional indentation."""
        if self._file_handle is None:
            print(
                f"Warning: Attempted to write to closed log file: {text}",
                file=sys.stderr,
            )
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
        except OSError as e:
            print(f"Warning: Error writing to log file: {e}", file=sys.stderr)
