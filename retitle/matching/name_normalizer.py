"""Name normalization for PDF filenames and titles.

Two forms are produced from a raw filename or title:

- ``normalize_name`` gives the display form used as the proposed output name:
  the trailing ``.pdf`` extension and surrounding whitespace are removed,
  casing and punctuation are kept.
- ``comparison_key`` gives the form the fuzzy matcher scores: lowercase,
  punctuation replaced by spaces, letter/digit runs split apart and
  whitespace collapsed.

Example:
    >>> normalize_name("  Annual_Report_2023.pdf ")
    'Annual_Report_2023'
    >>> comparison_key("Annual_Report_2023")
    'annual report 2023'
    >>> comparison_key("AR2023_en_book")
    'ar 2023 en book'
"""

import re

PDF_EXTENSION = ".pdf"

# Anything that is not a letter or a digit (underscore included)
_PUNCTUATION_PATTERN = re.compile(r"[\W_]+")
# Boundary between a letter and a digit, in either direction
_LETTER_DIGIT_BOUNDARY = re.compile(r"(?<=[^\W\d_])(?=\d)|(?<=\d)(?=[^\W\d_])")


def normalize_name(raw: str) -> str:
    """Strip the trailing PDF extension and surrounding whitespace.

    Repeated extensions (``report.pdf.pdf``) are all removed so the function
    is idempotent. Never fails; an empty string normalizes to itself.

    Args:
        raw: Raw filename or title.

    Returns:
        The display form of the name.
    """
    name = raw.strip()
    while name.lower().endswith(PDF_EXTENSION):
        name = name[: -len(PDF_EXTENSION)].rstrip()
    return name


def comparison_key(raw: str) -> str:
    """Return the case and punctuation insensitive form of a name.

    Args:
        raw: Raw filename, title or reference name.

    Returns:
        Space separated lowercase tokens, or an empty string when the name
        has no alphanumeric content.
    """
    text = _PUNCTUATION_PATTERN.sub(" ", normalize_name(raw).lower())
    text = _LETTER_DIGIT_BOUNDARY.sub(" ", text)
    return " ".join(text.split())
