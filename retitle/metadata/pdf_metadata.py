"""
PDF metadata adapter for the PDF title reconciliation tool.

This module contains the PdfMetadataAdapter class which reads and rewrites
the /Title entry of a PDF's document information dictionary. Documents are
handled as opaque byte buffers.
"""

import logging
from io import BytesIO

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from retitle.errors import ReadError, WriteError

# Configure module logger
logger = logging.getLogger(__name__)


class PdfMetadataAdapter:
    """
    Reads and writes the title metadata of PDF documents.

    Both operations take the document bytes and never touch the filesystem.
    Failures are raised as ReadError / WriteError carrying the document name
    so the caller can attach them to the document's record.
    """

    TITLE_KEY = "/Title"

    def read_title(self, content: bytes, document_name: str = "") -> str:
        """
        Read the embedded title of a PDF.

        Parameters:
            content (bytes): Raw PDF bytes.
            document_name (str): Name used in error messages.

        Returns:
            str: The metadata title, or an empty string if the document has none.

        Raises:
            ReadError: If the bytes are empty, malformed or encrypted.
        """
        reader = self._open(content, document_name)
        try:
            metadata = reader.metadata
        except (PyPdfError, ValueError, KeyError, TypeError) as e:
            raise ReadError(document_name, f"Cannot read metadata: {e}") from e

        if metadata is None or metadata.title is None:
            logger.debug("No title metadata in %s", document_name)
            return ""
        return str(metadata.title)

    def write_title(self, content: bytes, title: str, document_name: str = "") -> bytes:
        """
        Return a copy of the PDF with its /Title entry set to ``title``.

        Other document information entries are preserved.

        Parameters:
            content (bytes): Raw PDF bytes.
            title (str): New metadata title.
            document_name (str): Name used in error messages.

        Returns:
            bytes: The re-serialized PDF.

        Raises:
            WriteError: If the document cannot be loaded or saved.
        """
        try:
            reader = self._open(content, document_name)
        except ReadError as e:
            raise WriteError(document_name, e.reason) from e

        try:
            writer = PdfWriter(clone_from=reader)
            if reader.metadata:
                writer.add_metadata(dict(reader.metadata))
            writer.add_metadata({self.TITLE_KEY: title})

            buffer = BytesIO()
            writer.write(buffer)
        except (PyPdfError, ValueError, KeyError, TypeError, OSError) as e:
            raise WriteError(document_name, f"Cannot save document: {e}") from e

        logger.debug("Set title of %s to %r", document_name, title)
        return buffer.getvalue()

    def _open(self, content: bytes, document_name: str) -> PdfReader:
        """
        Load a PdfReader over ``content``.

        Raises:
            ReadError: If the bytes are empty, not a PDF, or encrypted.
        """
        if not content:
            raise ReadError(document_name, "File is empty")

        try:
            reader = PdfReader(BytesIO(content))
        except (PyPdfError, ValueError, KeyError, TypeError, OSError) as e:
            raise ReadError(document_name, f"Invalid PDF: {e}") from e

        if reader.is_encrypted:
            raise ReadError(document_name, "Document is encrypted")

        return reader
