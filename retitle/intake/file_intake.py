"""File intake for collecting the PDFs of a batch.

This module provides the FileIntake class which turns command-line paths
(files and directories) into an ordered list of IntakeFile objects. Only
files whose media type is PDF are kept; everything else is filtered out
silently.

Example:
    >>> from retitle.intake import FileIntake
    >>> intake = FileIntake()
    >>> files = intake.collect([Path("/data/reports")])
    >>> for item in files:
    ...     print(f"{item.name}: {len(item.content)} bytes")
"""

import mimetypes
from pathlib import Path
from typing import Iterable, Iterator, List

from retitle.models import IntakeFile

PDF_MEDIA_TYPE = "application/pdf"


class FileIntake:
    """Collects PDF files from files and directories.

    Directory contents are visited in name order so the batch order is
    stable between runs. Paths that cannot be read are recorded as errors
    and skipped.

    Attributes:
        recursive: Whether to descend into subdirectories.
        _errors: List of error messages encountered during collection.
    """

    def __init__(self, recursive: bool = False) -> None:
        """Initialize the FileIntake.

        Args:
            recursive: If True, directories are walked recursively.
                Defaults to False.
        """
        self.recursive = recursive
        self._errors: List[str] = []

    def collect(self, paths: Iterable[Path]) -> List[IntakeFile]:
        """Collect the PDF files found under ``paths``.

        Args:
            paths: Files and/or directories, in the order to process them.

        Returns:
            IntakeFile objects in input order. A file reachable through
            several paths is only collected once.
        """
        files: List[IntakeFile] = []
        seen = set()

        for path in paths:
            for file_path in self._expand(path):
                try:
                    key = file_path.resolve()
                except OSError:
                    key = file_path
                if key in seen:
                    continue
                seen.add(key)

                if not self.is_pdf(file_path.name):
                    continue

                try:
                    content = file_path.read_bytes()
                except OSError as e:
                    self._errors.append(f"Cannot read {file_path}: {e}")
                    continue

                files.append(IntakeFile(name=file_path.name, content=content))

        return files

    @staticmethod
    def is_pdf(filename: str) -> bool:
        """Return True if the declared media type of ``filename`` is PDF."""
        media_type, _ = mimetypes.guess_type(filename, strict=False)
        return media_type == PDF_MEDIA_TYPE

    def get_errors(self) -> List[str]:
        """Get the list of errors encountered during collection.

        Returns:
            Copy of the error list.
        """
        return self._errors.copy()

    def clear_errors(self) -> None:
        """Clear the recorded errors."""
        self._errors.clear()

    def _expand(self, path: Path) -> Iterator[Path]:
        """Yield the files designated by ``path``."""
        if path.is_file():
            yield path
            return

        if not path.is_dir():
            self._errors.append(f"Path not found: {path}")
            return

        try:
            entries = sorted(path.iterdir(), key=lambda p: p.name)
        except OSError as e:
            self._errors.append(f"Cannot list {path}: {e}")
            return

        for entry in entries:
            if entry.is_file():
                yield entry
            elif entry.is_dir() and self.recursive:
                yield from self._expand(entry)
