"""Pytest fixtures for retitle tests."""

import io
import tempfile
from pathlib import Path
from typing import Generator, List, Optional

import pytest
from pypdf import PdfWriter
from rich.console import Console

from retitle.models import IntakeFile
from retitle.orchestration import ReconciliationController
from retitle.ui import ReviewTUI

EXAMPLE_CORPUS = ["annual_report_2023", "annual_report_2022", "ar2023_en_book"]


def make_pdf(
    title: Optional[str] = None,
    author: Optional[str] = None,
    password: Optional[str] = None,
) -> bytes:
    """Build a one-page PDF in memory.

    Args:
        title: Optional /Title metadata.
        author: Optional /Author metadata.
        password: If given, the document is encrypted with this user password.

    Returns:
        The PDF bytes.
    """
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)

    metadata = {}
    if title is not None:
        metadata["/Title"] = title
    if author is not None:
        metadata["/Author"] = author
    if metadata:
        writer.add_metadata(metadata)

    if password is not None:
        writer.encrypt(password)

    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def make_intake_file(name: str, title: Optional[str] = None) -> IntakeFile:
    """Helper to create a valid IntakeFile for testing."""
    return IntakeFile(name=name, content=make_pdf(title=title))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def example_corpus() -> List[str]:
    """Reference corpus used by the matching examples."""
    return list(EXAMPLE_CORPUS)


@pytest.fixture
def three_files() -> List[IntakeFile]:
    """A batch of three valid PDFs, the first one with a metadata title."""
    return [
        make_intake_file("Annual_Report_2023.pdf", title="Annual Report"),
        make_intake_file("report_q1_2023.pdf"),
        make_intake_file("misc notes.pdf"),
    ]


@pytest.fixture
def controller(example_corpus: List[str]) -> ReconciliationController:
    """Controller over the example corpus with default policy."""
    return ReconciliationController(reference_corpus=example_corpus)


@pytest.fixture
def pdf_dir(temp_dir: Path) -> Path:
    """Directory with two PDFs, one non-PDF file and one corrupt PDF.

    Creates:
        incoming/
        ├── Annual_Report_2023.pdf   (title "Old Title")
        ├── broken.pdf               (not a PDF)
        ├── notes.txt
        └── sustainability_report_2023.pdf
    """
    base = temp_dir / "incoming"
    base.mkdir()
    (base / "Annual_Report_2023.pdf").write_bytes(make_pdf(title="Old Title"))
    (base / "sustainability_report_2023.pdf").write_bytes(make_pdf())
    (base / "broken.pdf").write_bytes(b"this is not a pdf")
    (base / "notes.txt").write_text("not a pdf either")
    return base


@pytest.fixture
def tui_with_output() -> tuple[ReviewTUI, io.StringIO]:
    """Create a ReviewTUI with captured output."""
    output = io.StringIO()
    console = Console(file=output, width=120)
    return ReviewTUI(console=console), output
