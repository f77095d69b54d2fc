"""ReconciliationController: the per-document review state machine.

The controller owns the list of ReconciliationRecords for a batch and a
cursor on the record under review. It walks through the session states:

    INITIALIZING --initialize()--> REVIEWING --confirm() on last--> FINALIZING
    FINALIZING --finalize()--> DONE
    FINALIZING --finalize() fails--> REVIEWING

Example:
    from retitle.orchestration import ReconciliationController

    controller = ReconciliationController(reference_corpus=corpus)
    controller.initialize(files)
    controller.toggle_reference("annual_report_2023")
    controller.set_edit_buffer("annual_report_2023")
    controller.confirm()
    ...
    batch = controller.finalize(BatchEmitter())
"""

import logging
from typing import List, Optional, Sequence, Set, Tuple

from retitle.errors import EmitError, EmptyBatchError, ReadError, WriteError
from retitle.matching import FuzzyMatcher, normalize_name
from retitle.metadata import PdfMetadataAdapter
from retitle.models import (
    BatchReport,
    FinalizedBatch,
    InputDocument,
    IntakeFile,
    ReconciliationRecord,
    ReportRow,
    SessionState,
)
from retitle.output import BatchEmitter

logger = logging.getLogger(__name__)


class ReconciliationController:
    """Drives the review of a batch of documents, one record at a time.

    Matches are computed once, when the batch arrives. The operator then
    navigates between records, toggles reference names, edits the proposed
    name and confirms it. Confirming the last record moves the session to
    FINALIZING; finalize() packages the output.

    Attributes:
        reference_corpus: Ordered list of known document names.
        state: Current SessionState.
        current_index: Index of the record under review.
        edit_buffer: Free text name being edited for the current record.
    """

    def __init__(
        self,
        reference_corpus: Sequence[str],
        matcher: Optional[FuzzyMatcher] = None,
        metadata: Optional[PdfMetadataAdapter] = None,
    ) -> None:
        """Initialize the ReconciliationController.

        Args:
            reference_corpus: Ordered list of known document names. Copied,
                the controller never modifies it.
            matcher: FuzzyMatcher to use. Defaults to limit 5, cutoff 60.
            metadata: Metadata adapter used to read and write titles.
        """
        self.reference_corpus: Tuple[str, ...] = tuple(reference_corpus)
        self._matcher = matcher if matcher is not None else FuzzyMatcher()
        self._metadata = metadata if metadata is not None else PdfMetadataAdapter()

        self.state = SessionState.INITIALIZING
        self.current_index = 0
        self.edit_buffer = ""
        self._records: List[ReconciliationRecord] = []

    @property
    def records(self) -> List[ReconciliationRecord]:
        """Records of the batch, in input order."""
        return list(self._records)

    @property
    def current_record(self) -> ReconciliationRecord:
        """The record under review.

        Raises:
            RuntimeError: If no batch has been loaded.
        """
        if not self._records:
            raise RuntimeError("No batch loaded")
        return self._records[self.current_index]

    @property
    def is_last(self) -> bool:
        """Whether the cursor is on the last record."""
        return self.current_index == len(self._records) - 1

    def initialize(self, files: Sequence[IntakeFile]) -> List[ReconciliationRecord]:
        """Load a batch and compute matches for every document.

        Runs once per batch; call reset() before loading another one.

        Args:
            files: Intake files in batch order.

        Returns:
            The created records, one per file, in input order.

        Raises:
            RuntimeError: If a batch is already loaded.
            EmptyBatchError: If ``files`` is empty. The controller stays idle.
        """
        if self.state is not SessionState.INITIALIZING or self._records:
            raise RuntimeError("A batch is already loaded; reset() the session first")
        if not files:
            raise EmptyBatchError("No PDF documents to process")

        records: List[ReconciliationRecord] = []
        for intake_file in files:
            default_name = self.default_name(intake_file.name)
            try:
                title = self._metadata.read_title(intake_file.content, intake_file.name)
            except ReadError as e:
                logger.warning("Cannot read %s: %s", intake_file.name, e.reason)
                record = ReconciliationRecord(
                    source=InputDocument(raw_name=intake_file.name, content=intake_file.content),
                    final_name=default_name,
                    final_title=default_name,
                )
                record.mark_failed(e.reason)
                records.append(record)
                continue

            matches = self._matcher.match(default_name, self.reference_corpus)
            records.append(
                ReconciliationRecord(
                    source=InputDocument(
                        raw_name=intake_file.name,
                        raw_title=title,
                        content=intake_file.content,
                    ),
                    matches=matches,
                    final_name=default_name,
                    final_title=default_name,
                )
            )

        self._records = records
        self.current_index = 0
        self.edit_buffer = records[0].final_name
        self.state = SessionState.REVIEWING
        logger.debug(
            "Initialized batch of %d document(s), %d failed",
            len(records),
            sum(1 for r in records if r.failed),
        )
        return self.records

    def next(self) -> int:
        """Move to the next record. No-op on the last record.

        Returns:
            The current index after the move.
        """
        self._require_state(SessionState.REVIEWING)
        if self.current_index < len(self._records) - 1:
            self._move_to(self.current_index + 1)
        return self.current_index

    def previous(self) -> int:
        """Move to the previous record. No-op on the first record.

        Returns:
            The current index after the move.
        """
        self._require_state(SessionState.REVIEWING)
        if self.current_index > 0:
            self._move_to(self.current_index - 1)
        return self.current_index

    def toggle_reference(self, reference_name: str) -> bool:
        """Toggle a matched reference name in the current record's selection.

        Args:
            reference_name: Name of one of the current record's matches.

        Returns:
            True if the name is now selected, False if it was removed.

        Raises:
            ValueError: If the name is not among the current record's matches.
        """
        self._require_state(SessionState.REVIEWING)
        record = self.current_record
        if record.score_for(reference_name) is None:
            raise ValueError(f"'{reference_name}' is not a match of {record.source.raw_name}")

        if reference_name in record.selected_reference_names:
            record.selected_reference_names.remove(reference_name)
            return False
        record.selected_reference_names.append(reference_name)
        return True

    def set_edit_buffer(self, text: str) -> None:
        """Overwrite the edit buffer for the current record."""
        self._require_state(SessionState.REVIEWING)
        self.edit_buffer = text

    def use_original_name(self) -> None:
        """Reset the edit buffer to the normalized original filename."""
        self.set_edit_buffer(self.default_name(self.current_record.source.raw_name))

    def use_metadata_title(self) -> None:
        """Copy the original metadata title into the edit buffer, if there is one."""
        title = self.current_record.source.raw_title
        if title:
            self.set_edit_buffer(title)

    def confirm(self) -> SessionState:
        """Commit the edit buffer into the current record.

        An empty buffer falls back to the normalized original filename. The
        cursor does not move; on the last record the session moves to
        FINALIZING.

        Returns:
            The session state after the commit.
        """
        self._require_state(SessionState.REVIEWING)
        record = self.current_record
        name = normalize_name(self.edit_buffer) or self.default_name(record.source.raw_name)

        record.final_name = name
        record.final_title = name
        record.confirmed = True
        self.edit_buffer = name

        if self.is_last:
            self.state = SessionState.FINALIZING
        return self.state

    def finalize(self, emitter: Optional[BatchEmitter] = None) -> FinalizedBatch:
        """Rewrite titles and produce the archive and the report.

        Documents whose title cannot be written are marked failed and left out
        of the archive; the rest of the batch is still packaged.

        Args:
            emitter: BatchEmitter used to package the output.

        Returns:
            FinalizedBatch with the report and both artifacts.

        Raises:
            RuntimeError: If the session is not FINALIZING.
            EmitError: If the archive or the report cannot be produced. The
                session returns to REVIEWING so the operator can retry.
        """
        self._require_state(SessionState.FINALIZING)
        emitter = emitter if emitter is not None else BatchEmitter()

        entries: List[Tuple[str, bytes]] = []
        used_names: Set[str] = set()
        for record in self._records:
            if record.failed:
                continue
            try:
                record.output_content = self._metadata.write_title(
                    record.source.content, record.final_title, record.source.raw_name
                )
            except WriteError as e:
                logger.warning("Cannot write %s: %s", record.source.raw_name, e.reason)
                record.mark_failed(e.reason)
                continue
            entries.append((self._archive_name(record.final_name, used_names), record.output_content))

        report = self.build_report()
        try:
            archive_bytes = emitter.package_archive(entries)
            report_bytes = emitter.write_report([row.as_tuple() for row in report.rows])
        except EmitError:
            self.state = SessionState.REVIEWING
            self.edit_buffer = self.current_record.final_name
            raise

        self.state = SessionState.DONE
        return FinalizedBatch(
            report=report,
            archive_bytes=archive_bytes,
            report_bytes=report_bytes,
            archive_entries=tuple(name for name, _ in entries),
        )

    def build_report(self) -> BatchReport:
        """Build the audit report over every record, in input order.

        Raises:
            RuntimeError: If records are still under review.
        """
        if self.state not in (SessionState.FINALIZING, SessionState.DONE):
            raise RuntimeError("Report is only available once every record is finalized")

        rows: List[ReportRow] = []
        for record in self._records:
            scores = []
            for name in record.selected_reference_names:
                score = record.score_for(name)
                if score is not None:
                    scores.append(f"{score}%")
            rows.append(
                ReportRow(
                    original_filename=record.source.raw_name,
                    original_title=record.source.raw_title,
                    new_filename="" if record.failed else record.final_name,
                    selected_names=", ".join(record.selected_reference_names),
                    selected_scores=", ".join(scores),
                    failure_reason=record.failure_reason,
                )
            )
        return BatchReport(rows=tuple(rows))

    def failures(self) -> List[Tuple[str, str]]:
        """Return ``(document name, reason)`` for every failed record."""
        return [(r.source.raw_name, r.failure_reason) for r in self._records if r.failed]

    def reset(self) -> None:
        """Discard the session and return to INITIALIZING."""
        self._records = []
        self.current_index = 0
        self.edit_buffer = ""
        self.state = SessionState.INITIALIZING

    @staticmethod
    def default_name(raw_name: str) -> str:
        """Return the proposed name for a file.

        A name that is nothing but extensions (``.pdf.pdf``) normalizes to an
        empty string; the stripped raw name is kept instead.
        """
        return normalize_name(raw_name) or raw_name.strip() or raw_name

    def _move_to(self, index: int) -> None:
        self.current_index = index
        self.edit_buffer = self._records[index].final_name

    def _require_state(self, expected: SessionState) -> None:
        if self.state is not expected:
            raise RuntimeError(
                f"Operation requires state {expected.value}, session is {self.state.value}"
            )

    def _archive_name(self, final_name: str, used_names: Set[str]) -> str:
        """Return a unique ``<name>.pdf`` archive member name."""
        base = final_name.replace("/", "_").replace("\\", "_")
        candidate = f"{base}.pdf"
        counter = 1
        while candidate.lower() in used_names:
            counter += 1
            candidate = f"{base} ({counter}).pdf"
        used_names.add(candidate.lower())
        return candidate
