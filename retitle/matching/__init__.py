"""Name matching package for retitle.

This package contains the name normalizer and the FuzzyMatcher used to
reconcile document names against a reference corpus.

Example:
    >>> from retitle.matching import FuzzyMatcher, normalize_name
    >>> matcher = FuzzyMatcher(limit=5, cutoff=60)
    >>> matches = matcher.match(normalize_name("annual_report_2023.pdf"), corpus)
    >>> for match in matches:
    ...     print(f"{match.reference_name}: {match.score}%")
"""

from .fuzzy_matcher import DEFAULT_CUTOFF, DEFAULT_LIMIT, FuzzyMatcher
from .name_normalizer import comparison_key, normalize_name

__all__ = [
    "FuzzyMatcher",
    "DEFAULT_LIMIT",
    "DEFAULT_CUTOFF",
    "normalize_name",
    "comparison_key",
]
