"""Error definitions for the PDF title reconciliation tool."""


class RetitleError(Exception):
    """Base class for errors raised by retitle."""


class DocumentError(RetitleError):
    """Raised when a single document cannot be processed.

    These errors are caught at the document boundary and attached to the
    document's ReconciliationRecord instead of aborting the batch.
    """

    def __init__(self, document_name: str, reason: str) -> None:
        self.document_name = document_name
        self.reason = reason
        super().__init__(f"{document_name}: {reason}")


class ReadError(DocumentError):
    """Raised when a PDF's metadata is unreadable, encrypted or corrupt."""


class WriteError(DocumentError):
    """Raised when a PDF cannot be re-serialized with its new title."""


class EmptyBatchError(RetitleError):
    """Raised when a batch contains no eligible PDF documents."""


class EmitError(RetitleError):
    """Raised when the archive or the report cannot be produced for the batch."""
