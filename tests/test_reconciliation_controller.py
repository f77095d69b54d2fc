"""Tests for the ReconciliationController state machine."""

import io
import zipfile
from typing import List
from unittest.mock import MagicMock

import pytest
from openpyxl import load_workbook
from pypdf import PdfReader

from conftest import make_intake_file, make_pdf
from retitle.errors import EmitError, EmptyBatchError, WriteError
from retitle.metadata import PdfMetadataAdapter
from retitle.models import IntakeFile, SessionState
from retitle.orchestration import ReconciliationController
from retitle.output import BatchEmitter


class FailingWriteAdapter(PdfMetadataAdapter):
    """Metadata adapter that cannot write one named document."""

    def __init__(self, failing_name: str) -> None:
        super().__init__()
        self.failing_name = failing_name

    def write_title(self, content: bytes, title: str, document_name: str = "") -> bytes:
        if document_name == self.failing_name:
            raise WriteError(document_name, "Cannot save document: disk full")
        return super().write_title(content, title, document_name)


def confirm_all(controller: ReconciliationController) -> None:
    """Confirm every record with its proposed name."""
    while controller.confirm() is SessionState.REVIEWING:
        controller.next()


class TestInitialize:
    """Test batch loading."""

    def test_initial_state(self, controller: ReconciliationController) -> None:
        assert controller.state is SessionState.INITIALIZING
        assert controller.records == []

    def test_initialize_creates_records(
        self, controller: ReconciliationController, three_files: List[IntakeFile]
    ) -> None:
        records = controller.initialize(three_files)

        assert len(records) == 3
        assert controller.state is SessionState.REVIEWING
        assert controller.current_index == 0
        assert controller.edit_buffer == "Annual_Report_2023"
        assert [r.source.raw_name for r in records] == [f.name for f in three_files]

    def test_initialize_reads_titles_and_matches(
        self, controller: ReconciliationController, three_files: List[IntakeFile]
    ) -> None:
        records = controller.initialize(three_files)

        first = records[0]
        assert first.source.raw_title == "Annual Report"
        assert first.final_name == "Annual_Report_2023"
        assert first.final_title == "Annual_Report_2023"
        assert [m.score for m in first.matches] == [100, 94, 82]
        assert first.selected_reference_names == []
        assert not first.confirmed
        assert records[1].source.raw_title == ""

    def test_empty_batch(self, controller: ReconciliationController) -> None:
        with pytest.raises(EmptyBatchError):
            controller.initialize([])
        assert controller.state is SessionState.INITIALIZING

    def test_initialize_twice(
        self, controller: ReconciliationController, three_files: List[IntakeFile]
    ) -> None:
        controller.initialize(three_files)
        with pytest.raises(RuntimeError):
            controller.initialize(three_files)

    def test_unreadable_document_becomes_failed_record(
        self, controller: ReconciliationController
    ) -> None:
        files = [
            IntakeFile(name="broken.pdf", content=b"this is not a pdf"),
            IntakeFile(name="empty.pdf", content=b""),
            make_intake_file("good.pdf"),
        ]

        records = controller.initialize(files)

        assert records[0].failed
        assert records[0].failure_reason.startswith("Invalid PDF")
        assert records[0].matches == []
        assert records[0].final_name == "broken"
        assert records[1].failure_reason == "File is empty"
        assert not records[2].failed
        assert controller.failures() == [
            ("broken.pdf", records[0].failure_reason),
            ("empty.pdf", "File is empty"),
        ]

    def test_reference_corpus_is_copied(self, example_corpus: List[str]) -> None:
        controller = ReconciliationController(reference_corpus=example_corpus)
        example_corpus.append("extra")
        assert controller.reference_corpus == (
            "annual_report_2023",
            "annual_report_2022",
            "ar2023_en_book",
        )

    def test_current_record_without_batch(self, controller: ReconciliationController) -> None:
        with pytest.raises(RuntimeError):
            controller.current_record


class TestNavigation:
    """Test next/previous and the edit buffer."""

    @pytest.fixture
    def loaded(
        self, controller: ReconciliationController, three_files: List[IntakeFile]
    ) -> ReconciliationController:
        controller.initialize(three_files)
        return controller

    def test_previous_on_first_is_noop(self, loaded: ReconciliationController) -> None:
        assert loaded.previous() == 0

    def test_next_on_last_is_noop(self, loaded: ReconciliationController) -> None:
        loaded.next()
        loaded.next()
        assert loaded.next() == 2
        assert loaded.is_last

    def test_navigation_reloads_buffer(self, loaded: ReconciliationController) -> None:
        loaded.next()
        assert loaded.edit_buffer == "report_q1_2023"

    def test_unconfirmed_edit_discarded_on_move(self, loaded: ReconciliationController) -> None:
        loaded.set_edit_buffer("draft name")
        loaded.next()
        loaded.previous()
        assert loaded.edit_buffer == "Annual_Report_2023"
        assert loaded.current_record.final_name == "Annual_Report_2023"

    def test_confirmed_name_restored_on_return(self, loaded: ReconciliationController) -> None:
        loaded.set_edit_buffer("annual_report_2023")
        loaded.confirm()
        loaded.next()
        loaded.previous()
        assert loaded.edit_buffer == "annual_report_2023"

    def test_navigation_requires_reviewing(self, controller: ReconciliationController) -> None:
        with pytest.raises(RuntimeError):
            controller.next()
        with pytest.raises(RuntimeError):
            controller.previous()

    def test_use_original_name(self, loaded: ReconciliationController) -> None:
        loaded.set_edit_buffer("something else")
        loaded.use_original_name()
        assert loaded.edit_buffer == "Annual_Report_2023"

    def test_use_metadata_title(self, loaded: ReconciliationController) -> None:
        loaded.use_metadata_title()
        assert loaded.edit_buffer == "Annual Report"

    def test_use_metadata_title_without_title(self, loaded: ReconciliationController) -> None:
        loaded.next()
        loaded.set_edit_buffer("kept")
        loaded.use_metadata_title()
        assert loaded.edit_buffer == "kept"


class TestSelection:
    """Test toggling reference names."""

    @pytest.fixture
    def loaded(
        self, controller: ReconciliationController, three_files: List[IntakeFile]
    ) -> ReconciliationController:
        controller.initialize(three_files)
        return controller

    def test_toggle_adds_then_removes(self, loaded: ReconciliationController) -> None:
        assert loaded.toggle_reference("annual_report_2022") is True
        assert loaded.current_record.selected_reference_names == ["annual_report_2022"]
        assert loaded.toggle_reference("annual_report_2022") is False
        assert loaded.current_record.selected_reference_names == []

    def test_selection_keeps_insertion_order(self, loaded: ReconciliationController) -> None:
        loaded.toggle_reference("ar2023_en_book")
        loaded.toggle_reference("annual_report_2023")
        assert loaded.current_record.selected_reference_names == [
            "ar2023_en_book",
            "annual_report_2023",
        ]

    def test_toggle_unknown_name(self, loaded: ReconciliationController) -> None:
        with pytest.raises(ValueError):
            loaded.toggle_reference("not_a_match")

    def test_selection_does_not_change_name(self, loaded: ReconciliationController) -> None:
        loaded.toggle_reference("annual_report_2023")
        assert loaded.edit_buffer == "Annual_Report_2023"


class TestConfirm:
    """Test committing the edit buffer."""

    @pytest.fixture
    def loaded(
        self, controller: ReconciliationController, three_files: List[IntakeFile]
    ) -> ReconciliationController:
        controller.initialize(three_files)
        return controller

    def test_confirm_commits_buffer(self, loaded: ReconciliationController) -> None:
        loaded.set_edit_buffer("annual_report_2023")
        state = loaded.confirm()

        record = loaded.current_record
        assert state is SessionState.REVIEWING
        assert record.confirmed
        assert record.final_name == "annual_report_2023"
        assert record.final_title == "annual_report_2023"
        assert loaded.current_index == 0

    def test_confirm_normalizes_buffer(self, loaded: ReconciliationController) -> None:
        loaded.set_edit_buffer("  New Name.pdf ")
        loaded.confirm()
        assert loaded.current_record.final_name == "New Name"

    def test_empty_buffer_falls_back_to_original(self, loaded: ReconciliationController) -> None:
        loaded.set_edit_buffer("   ")
        loaded.confirm()
        assert loaded.current_record.final_name == "Annual_Report_2023"

    def test_confirm_last_moves_to_finalizing(self, loaded: ReconciliationController) -> None:
        loaded.next()
        loaded.next()
        assert loaded.confirm() is SessionState.FINALIZING

    def test_single_document_batch(self, controller: ReconciliationController) -> None:
        controller.initialize([make_intake_file("only.pdf")])
        assert controller.confirm() is SessionState.FINALIZING

    def test_confirm_requires_reviewing(self, loaded: ReconciliationController) -> None:
        confirm_all(loaded)
        with pytest.raises(RuntimeError):
            loaded.confirm()


class TestFinalize:
    """Test report building and output packaging."""

    def test_three_document_example(
        self, controller: ReconciliationController, three_files: List[IntakeFile]
    ) -> None:
        """Confirm the first and last record; the middle keeps its default name."""
        controller.initialize(three_files)
        controller.toggle_reference("annual_report_2023")
        controller.set_edit_buffer("annual_report_2023")
        controller.confirm()
        controller.next()
        controller.next()
        controller.confirm()

        report = controller.build_report()
        assert len(report) == 3
        assert report.rows[0].as_tuple() == (
            "Annual_Report_2023.pdf",
            "Annual Report",
            "annual_report_2023",
            "annual_report_2023",
            "100%",
            "",
        )
        assert report.rows[1].new_filename == "report_q1_2023"
        assert report.rows[1].selected_names == ""
        assert report.rows[2].new_filename == "misc notes"

        batch = controller.finalize(BatchEmitter())

        assert controller.state is SessionState.DONE
        assert batch.archive_entries == (
            "annual_report_2023.pdf",
            "report_q1_2023.pdf",
            "misc notes.pdf",
        )
        with zipfile.ZipFile(io.BytesIO(batch.archive_bytes)) as archive:
            assert archive.namelist() == list(batch.archive_entries)
            first = PdfReader(io.BytesIO(archive.read("annual_report_2023.pdf")))
            middle = PdfReader(io.BytesIO(archive.read("report_q1_2023.pdf")))
        assert first.metadata.title == "annual_report_2023"
        assert middle.metadata.title == "report_q1_2023"

    def test_report_scores_follow_selection_order(self, controller: ReconciliationController) -> None:
        controller.initialize([make_intake_file("annual_report_2023.pdf")])
        controller.toggle_reference("annual_report_2022")
        controller.toggle_reference("annual_report_2023")
        controller.confirm()

        row = controller.build_report().rows[0]
        assert row.selected_names == "annual_report_2022, annual_report_2023"
        assert row.selected_scores == "94%, 100%"

    def test_report_requires_finalizing(
        self, controller: ReconciliationController, three_files: List[IntakeFile]
    ) -> None:
        controller.initialize(three_files)
        with pytest.raises(RuntimeError):
            controller.build_report()
        with pytest.raises(RuntimeError):
            controller.finalize()

    def test_read_failure_reported_not_archived(self, controller: ReconciliationController) -> None:
        controller.initialize(
            [IntakeFile(name="broken.pdf", content=b"garbage"), make_intake_file("good.pdf")]
        )
        confirm_all(controller)

        batch = controller.finalize()

        assert batch.archive_entries == ("good.pdf",)
        failed_row = batch.report.rows[0]
        assert failed_row.new_filename == ""
        assert failed_row.original_title == ""
        assert failed_row.failure_reason.startswith("Invalid PDF")

    def test_write_failure_marks_record(self, example_corpus: List[str]) -> None:
        controller = ReconciliationController(
            reference_corpus=example_corpus,
            metadata=FailingWriteAdapter("locked.pdf"),
        )
        controller.initialize([make_intake_file("locked.pdf"), make_intake_file("open.pdf")])
        confirm_all(controller)

        batch = controller.finalize()

        locked = controller.records[0]
        assert locked.failed
        assert locked.output_content is None
        assert batch.archive_entries == ("open.pdf",)
        assert batch.report.rows[0].failure_reason == "Cannot save document: disk full"
        assert controller.state is SessionState.DONE

    def test_emit_failure_returns_to_review(
        self, controller: ReconciliationController, three_files: List[IntakeFile]
    ) -> None:
        controller.initialize(three_files)
        confirm_all(controller)

        emitter = MagicMock(spec=BatchEmitter)
        emitter.package_archive.side_effect = EmitError("Cannot create archive: disk full")

        with pytest.raises(EmitError):
            controller.finalize(emitter)

        assert controller.state is SessionState.REVIEWING
        assert controller.current_index == 2
        assert controller.edit_buffer == "misc notes"

        controller.confirm()
        batch = controller.finalize(BatchEmitter())
        assert controller.state is SessionState.DONE
        assert len(batch.archive_entries) == 3

    def test_duplicate_names_are_made_unique(self, controller: ReconciliationController) -> None:
        controller.initialize(
            [
                make_intake_file("one.pdf"),
                make_intake_file("two.pdf"),
                make_intake_file("three.pdf"),
            ]
        )
        for name in ("same", "Same", "same"):
            controller.set_edit_buffer(name)
            if controller.confirm() is SessionState.REVIEWING:
                controller.next()

        batch = controller.finalize()

        assert batch.archive_entries == ("same.pdf", "Same (2).pdf", "same (3).pdf")

    def test_path_separators_replaced(self, controller: ReconciliationController) -> None:
        controller.initialize([make_intake_file("one.pdf")])
        controller.set_edit_buffer("reports/2023")
        controller.confirm()

        batch = controller.finalize()

        assert batch.archive_entries == ("reports_2023.pdf",)
        assert batch.report.rows[0].new_filename == "reports/2023"

    def test_original_metadata_preserved(self, controller: ReconciliationController) -> None:
        content = make_pdf(title="Old", author="Finance Team")
        controller.initialize([IntakeFile(name="old.pdf", content=content)])
        controller.set_edit_buffer("new")
        controller.confirm()

        batch = controller.finalize()

        with zipfile.ZipFile(io.BytesIO(batch.archive_bytes)) as archive:
            reader = PdfReader(io.BytesIO(archive.read("new.pdf")))
        assert reader.metadata.title == "new"
        assert reader.metadata.author == "Finance Team"

    def test_control_character_title_does_not_block_batch(
        self, controller: ReconciliationController
    ) -> None:
        controller.initialize(
            [
                make_intake_file("good.pdf", title="Good"),
                make_intake_file("bad.pdf", title="Scan\x0bTitle"),
            ]
        )
        confirm_all(controller)

        batch = controller.finalize()

        assert controller.state is SessionState.DONE
        assert batch.archive_entries == ("good.pdf", "bad.pdf")
        sheet = load_workbook(io.BytesIO(batch.report_bytes)).active
        assert sheet.cell(row=3, column=2).value == "ScanTitle"

    def test_formula_like_names_reported_as_text(self, controller: ReconciliationController) -> None:
        controller.initialize([make_intake_file("=1+1.pdf", title="=SUM(1,2)")])
        controller.confirm()

        batch = controller.finalize()

        sheet = load_workbook(io.BytesIO(batch.report_bytes)).active
        assert [sheet.cell(row=2, column=c).value for c in (1, 2, 3)] == [
            "=1+1.pdf",
            "=SUM(1,2)",
            "=1+1",
        ]


class TestDefaultName:
    """Test the proposed name of files whose name is only an extension."""

    def test_extension_only_name_kept(self, controller: ReconciliationController) -> None:
        records = controller.initialize([make_intake_file(".PDF.pdf")])

        assert records[0].final_name == ".PDF.pdf"
        assert controller.edit_buffer == ".PDF.pdf"

    def test_empty_buffer_falls_back_to_raw_name(self, controller: ReconciliationController) -> None:
        controller.initialize([make_intake_file(".PDF.pdf")])
        controller.set_edit_buffer("")
        controller.confirm()

        batch = controller.finalize()

        assert controller.records[0].final_name == ".PDF.pdf"
        assert batch.archive_entries == (".PDF.pdf.pdf",)

    def test_default_name(self) -> None:
        assert ReconciliationController.default_name("report.pdf") == "report"
        assert ReconciliationController.default_name(" .pdf ") == ".pdf"


class TestReset:
    """Test discarding a session."""

    def test_reset_allows_new_batch(
        self, controller: ReconciliationController, three_files: List[IntakeFile]
    ) -> None:
        controller.initialize(three_files)
        controller.reset()

        assert controller.state is SessionState.INITIALIZING
        assert controller.records == []
        assert controller.edit_buffer == ""

        controller.initialize(three_files[:1])
        assert len(controller.records) == 1
