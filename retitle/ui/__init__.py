"""Terminal user interface package for retitle.

This package provides the ReviewTUI class, a Rich-based interface for
reviewing proposed names, selecting similar reference names and confirming
the final filename of each PDF.
"""

from .review_tui import ReviewTUI

__all__ = ["ReviewTUI"]
