"""Archive and report emission for finalized batches.

This module provides the BatchEmitter class which packages renamed PDFs into
a zip archive and writes the spreadsheet audit report.

Example:
    >>> from retitle.output import BatchEmitter
    >>> emitter = BatchEmitter()
    >>> archive = emitter.package_archive([("annual_report_2023.pdf", pdf_bytes)])
    >>> report = emitter.write_report([row.as_tuple() for row in batch_report.rows])
"""

import logging
import zipfile
from datetime import datetime
from io import BytesIO
from typing import Iterable, Optional, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from retitle.errors import EmitError

logger = logging.getLogger(__name__)

# Column order consumers of the report rely on
REPORT_COLUMNS = (
    "Original Filename",
    "Original Metadata Title",
    "New Filename",
    "Selected Similar Files",
    "Selected Similarity Scores",
    "Failure Reason",
)
REPORT_SHEET_TITLE = "Similarity Results"
REPORT_FILENAME = "similarity_results.xlsx"


def archive_filename(timestamp: Optional[datetime] = None) -> str:
    """Return the default archive name, e.g. ``renamed_pdfs_Wed Oct 18 2026.zip``.

    Args:
        timestamp: Date to embed. Defaults to now.
    """
    timestamp = timestamp or datetime.now()
    return f"renamed_pdfs_{timestamp.strftime('%a %b %d %Y')}.zip"


class BatchEmitter:
    """Produces the output artifacts of a reconciliation session.

    Both methods return the artifact as bytes; writing them to disk is left
    to the caller. Any failure is raised as EmitError, which is fatal to the
    batch's finalization.

    Attributes:
        column_widths: Column widths applied to the report sheet.
    """

    def __init__(self, column_widths: Sequence[int] = (40, 40, 40, 50, 30, 40)) -> None:
        self.column_widths = tuple(column_widths)

    def package_archive(self, entries: Iterable[Tuple[str, bytes]]) -> bytes:
        """Package ``(output_name, content)`` pairs into a zip archive.

        Args:
            entries: Archive member names and their bytes, in archive order.

        Returns:
            The zip archive bytes.

        Raises:
            EmitError: If the archive cannot be written.
        """
        buffer = BytesIO()
        count = 0
        try:
            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                for output_name, content in entries:
                    archive.writestr(output_name, content)
                    count += 1
        except (OSError, ValueError, zipfile.LargeZipFile) as e:
            raise EmitError(f"Cannot create archive: {e}") from e

        logger.debug("Packaged %d file(s) into archive", count)
        return buffer.getvalue()

    def write_report(self, rows: Iterable[Sequence[str]]) -> bytes:
        """Write the audit report as an xlsx workbook.

        Args:
            rows: Row tuples in REPORT_COLUMNS order.

        Returns:
            The workbook bytes.

        Raises:
            EmitError: If a value cannot be stored or the workbook cannot be saved.
        """
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = REPORT_SHEET_TITLE

        header_font = Font(bold=True)
        for column, (header, width) in enumerate(zip(REPORT_COLUMNS, self.column_widths), start=1):
            cell = sheet.cell(row=1, column=column, value=header)
            cell.font = header_font
            sheet.column_dimensions[get_column_letter(column)].width = width
        sheet.freeze_panes = "A2"

        count = 0
        buffer = BytesIO()
        try:
            for row_index, row in enumerate(rows, start=2):
                for column, value in enumerate(row, start=1):
                    self._write_cell(sheet.cell(row=row_index, column=column), value)
                count += 1
            workbook.save(buffer)
        except (OSError, ValueError) as e:
            raise EmitError(f"Cannot write report: {e}") from e

        logger.debug("Wrote report with %d row(s)", count)
        return buffer.getvalue()

    @staticmethod
    def _write_cell(cell, value) -> None:
        """Store ``value`` as literal text.

        Control characters are dropped, since worksheets cannot hold them, and
        strings starting with ``=`` stay text instead of becoming formulas.
        """
        if isinstance(value, str):
            cell.value = ILLEGAL_CHARACTERS_RE.sub("", value)
            cell.data_type = "s"
        else:
            cell.value = value
