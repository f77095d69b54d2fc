"""PDF metadata package for retitle.

This package provides the PdfMetadataAdapter class for reading and rewriting
the title metadata of PDF documents held in memory.

Example:
    >>> from retitle.metadata import PdfMetadataAdapter
    >>> adapter = PdfMetadataAdapter()
    >>> title = adapter.read_title(pdf_bytes, "report.pdf")
    >>> updated = adapter.write_title(pdf_bytes, "annual_report_2023", "report.pdf")
"""

from .pdf_metadata import PdfMetadataAdapter

__all__ = ["PdfMetadataAdapter"]
