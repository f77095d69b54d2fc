"""Output package for retitle.

This package provides the BatchEmitter class which produces the zip archive
of renamed PDFs and the spreadsheet audit report.
"""

from .batch_emitter import (
    REPORT_COLUMNS,
    REPORT_FILENAME,
    REPORT_SHEET_TITLE,
    BatchEmitter,
    archive_filename,
)

__all__ = [
    "BatchEmitter",
    "REPORT_COLUMNS",
    "REPORT_FILENAME",
    "REPORT_SHEET_TITLE",
    "archive_filename",
]
