"""Intake package for retitle.

This package collects the inputs of a session:

- FileIntake: Collects the PDF files of a batch from files and directories.
- load_reference_corpus: Loads the master list of known document names.

Example:
    >>> from retitle.intake import FileIntake, load_reference_corpus
    >>> files = FileIntake().collect([Path("/data/incoming")])
    >>> corpus = load_reference_corpus(Path("master_list.txt"))
"""

from .file_intake import PDF_MEDIA_TYPE, FileIntake
from .reference_corpus import DEFAULT_REFERENCE_NAMES, load_reference_corpus

__all__ = [
    "FileIntake",
    "PDF_MEDIA_TYPE",
    "DEFAULT_REFERENCE_NAMES",
    "load_reference_corpus",
]
