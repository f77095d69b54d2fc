"""RetitleOrchestrator for coordinating the match and review workflows.

This module provides the RetitleOrchestrator class that wires FileIntake,
ReconciliationController, ReviewTUI, BatchEmitter and SessionLogger into the
two workflows exposed by the CLI.

Example:
    from retitle.orchestration import RetitleOrchestrator
    from pathlib import Path

    orchestrator = RetitleOrchestrator(
        input_paths=[Path("/data/incoming")],
        output_dir=Path("/data/out"),
    )

    # Read-only match preview
    records = orchestrator.match()

    # Interactive review and output
    summary = orchestrator.review()
"""

import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from retitle.errors import EmitError, EmptyBatchError
from retitle.intake import FileIntake, load_reference_corpus
from retitle.matching import DEFAULT_CUTOFF, DEFAULT_LIMIT, FuzzyMatcher
from retitle.models import (
    BatchSummary,
    FinalizedBatch,
    ReconciliationRecord,
)
from retitle.orchestration.reconciliation_controller import ReconciliationController
from retitle.orchestration.session_logger import SessionLogger
from retitle.output import REPORT_FILENAME, BatchEmitter, archive_filename
from retitle.ui import ReviewTUI

logger = logging.getLogger(__name__)


class RetitleOrchestrator:
    """Orchestrates the match and review workflows.

    Both workflows share an intake phase (collect PDFs, load the reference
    corpus, read titles and compute matches). match() then displays and logs
    the proposals; review() adds the interactive review, writes the archive
    and the report, and returns a BatchSummary.

    Attributes:
        input_paths: Files and directories to collect PDFs from.
        reference_path: Optional master list file. None uses the built-in list.
        output_dir: Directory receiving the archive and the report.
        limit: Maximum number of matches per document.
        cutoff: Minimum match score.
        log_file_path: Optional path for the session log.
        recursive: Whether directories are walked recursively.
        verbose: Whether to display verbose output.
    """

    def __init__(
        self,
        input_paths: Sequence[Path],
        reference_path: Optional[Path] = None,
        output_dir: Optional[Path] = None,
        limit: int = DEFAULT_LIMIT,
        cutoff: int = DEFAULT_CUTOFF,
        log_file_path: Optional[Path] = None,
        recursive: bool = False,
        verbose: bool = False,
        write_log: bool = True,
    ) -> None:
        """Initialize the RetitleOrchestrator.

        Args:
            input_paths: Files and directories to collect PDFs from.
            reference_path: Master list file (text or CSV).
            output_dir: Output directory. Defaults to the current directory.
            limit: Maximum number of matches per document. Defaults to 5.
            cutoff: Minimum match score (0-100). Defaults to 60.
            log_file_path: Optional path for the session log. If not
                provided, a timestamped filename will be generated.
            recursive: If True, directories are walked recursively.
            verbose: If True, display additional details during execution.
            write_log: If False, no session log is written.

        Raises:
            ValueError: If output_dir exists but is not a directory, or if
                limit/cutoff is out of range.
        """
        output_dir = output_dir if output_dir is not None else Path.cwd()
        if output_dir.exists() and not output_dir.is_dir():
            raise ValueError(f"Output path is not a directory: {output_dir}")

        self.input_paths = list(input_paths)
        self.reference_path = reference_path
        self.output_dir = output_dir
        self.log_file_path = log_file_path
        self.recursive = recursive
        self.verbose = verbose
        self.write_log = write_log

        self._matcher = FuzzyMatcher(limit=limit, cutoff=cutoff)
        self._intake = FileIntake(recursive=recursive)
        self._emitter = BatchEmitter()
        self._tui = ReviewTUI()
        self._controller: Optional[ReconciliationController] = None
        self._reference_size = 0

        self._errors: List[str] = []

    @property
    def limit(self) -> int:
        return self._matcher.limit

    @property
    def cutoff(self) -> int:
        return self._matcher.cutoff

    def match(self) -> List[ReconciliationRecord]:
        """Execute the read-only match workflow.

        Collects the batch, computes matches, displays them and logs the
        intake phase. No file is written apart from the session log.

        Returns:
            Records of the batch (empty if there were no PDFs).

        Raises:
            OSError: If the reference corpus cannot be read.
        """
        self._errors.clear()
        records = self._execute_intake_phase()

        self._tui.display_intake_summary(records, self._reference_size, self.cutoff)
        self._tui.display_failures([(r.source.raw_name, r.failure_reason) for r in records if r.failed])

        session_log = self._open_session_log("MATCH ONLY")
        if session_log is not None:
            try:
                with session_log:
                    session_log.log_header()
                    self._log_intake(session_log, records)
            except OSError as e:
                print(f"Warning: Could not write log file: {e}", file=sys.stderr)
            else:
                if self.verbose:
                    self._tui.console.print(f"[dim]Log file: {session_log.get_log_path()}[/dim]")

        return records

    def review(self) -> BatchSummary:
        """Execute the interactive review workflow.

        Phases:
        1. Intake - Collect PDFs, read titles, compute matches
        2. Review - Operator confirms a name for each document
        3. Output - Rewrite titles, write the archive and the report
        4. Summary - Display and log results

        A batch-level output failure sends the operator back to the review;
        quitting the review returns an interrupted summary.

        Returns:
            BatchSummary for the session.

        Raises:
            OSError: If the reference corpus cannot be read.
        """
        start_time = time.time()
        self._errors.clear()

        records = self._execute_intake_phase()
        self._tui.display_intake_summary(records, self._reference_size, self.cutoff)
        if not records:
            return self._create_summary([], start_time)

        self._tui.display_failures(self._controller.failures())

        finalized: Optional[FinalizedBatch] = None
        while finalized is None:
            if not self._tui.review(self._controller):
                summary = self._create_summary(self._controller.records, start_time)
                summary.interrupted = True
                self._tui.display_summary(summary)
                return summary

            try:
                finalized = self._controller.finalize(self._emitter)
            except EmitError as e:
                logger.error("Output failed: %s", e)
                self._tui.display_batch_error(str(e))

        archive_path, report_path = self._write_outputs(finalized)
        self._tui.display_failures(self._controller.failures())

        summary = self._create_summary(self._controller.records, start_time)
        summary.archive_path = archive_path
        summary.report_path = report_path
        self._tui.display_summary(summary)

        session_log = self._open_session_log("REVIEW")
        if session_log is not None:
            try:
                with session_log:
                    session_log.log_header()
                    self._log_intake(session_log, self._controller.records)
                    session_log.log_review_phase(self._controller.records)
                    session_log.log_output(archive_path, report_path, finalized.archive_entries)
                    session_log.log_summary(summary)
            except OSError as e:
                print(f"Warning: Could not write log file: {e}", file=sys.stderr)
            else:
                if self.verbose:
                    self._tui.console.print(f"[dim]Log file: {session_log.get_log_path()}[/dim]")

        return summary

    def _execute_intake_phase(self) -> List[ReconciliationRecord]:
        """Collect the batch and initialize a fresh controller.

        Returns:
            Records of the batch, or an empty list for an empty batch.
        """
        self._intake.clear_errors()
        reference_corpus = load_reference_corpus(self.reference_path)
        self._reference_size = len(reference_corpus)

        files = self._intake.collect(self.input_paths)
        intake_errors = self._intake.get_errors()
        self._errors.extend(intake_errors)
        if self.verbose and intake_errors:
            self._tui.console.print(f"[dim]Intake encountered {len(intake_errors)} warnings[/dim]")

        self._controller = ReconciliationController(
            reference_corpus=reference_corpus,
            matcher=self._matcher,
        )
        try:
            return self._controller.initialize(files)
        except EmptyBatchError:
            return []

    def _write_outputs(
        self, finalized: FinalizedBatch
    ) -> Tuple[Optional[Path], Optional[Path]]:
        """Write the archive and the report into the output directory.

        Returns:
            Tuple of (archive_path, report_path); a path is None when its
            file could not be written.
        """
        archive_path: Optional[Path] = self.output_dir / archive_filename()
        report_path: Optional[Path] = self.output_dir / REPORT_FILENAME

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._errors.append(f"Cannot create output directory {self.output_dir}: {e}")
            return None, None

        try:
            archive_path.write_bytes(finalized.archive_bytes)
        except OSError as e:
            self._errors.append(f"Cannot write archive {archive_path}: {e}")
            archive_path = None

        try:
            report_path.write_bytes(finalized.report_bytes)
        except OSError as e:
            self._errors.append(f"Cannot write report {report_path}: {e}")
            report_path = None

        return archive_path, report_path

    def _create_summary(self, records: List[ReconciliationRecord], start_time: float) -> BatchSummary:
        """Aggregate statistics across the records of the session."""
        errors = self._errors.copy()
        errors.extend(f"{r.source.raw_name}: {r.failure_reason}" for r in records if r.failed)

        return BatchSummary(
            total_documents=len(records),
            metadata_changes=sum(
                1 for r in records if not r.failed and r.final_title != r.source.raw_title
            ),
            filename_changes=sum(
                1 for r in records
                if not r.failed and r.final_name != ReconciliationController.default_name(r.source.raw_name)
            ),
            failed_documents=sum(1 for r in records if r.failed),
            errors=errors,
            duration=time.time() - start_time,
        )

    def _open_session_log(self, mode: str) -> Optional[SessionLogger]:
        """Create the session logger; failures are reported and not fatal."""
        if not self.write_log:
            return None
        try:
            return SessionLogger(log_file_path=self.log_file_path, mode=mode)
        except OSError as e:
            print(f"Warning: Could not create log file: {e}", file=sys.stderr)
            return None

    def _log_intake(self, session_log: SessionLogger, records: List[ReconciliationRecord]) -> None:
        session_log.log_intake_phase(
            inputs=self.input_paths,
            reference_size=self._reference_size,
            limit=self.limit,
            cutoff=self.cutoff,
            records=records,
            intake_errors=self._intake.get_errors(),
        )

    @property
    def controller(self) -> Optional[ReconciliationController]:
        """Controller of the current session, once the intake phase ran."""
        return self._controller
