"""Fuzzy matching of document names against a reference corpus.

This module provides the FuzzyMatcher class which ranks the entries of a
reference corpus (the "master list") by similarity to a candidate name.

Scoring works on the comparison keys of both names (see
``retitle.matching.name_normalizer``):
    1. Token sort ratio: RapidFuzz ``token_sort_ratio`` over the sorted
       tokens, so word order does not matter.
    2. Abbreviation expansion: a short alphabetic token whose letters are the
       initials of words in the other name (``ar`` vs ``annual report``) is
       expanded to those words and the comparison is repeated.
The score is the best of both, rounded to an integer percentage.

Example:
    >>> from retitle.matching import FuzzyMatcher
    >>> matcher = FuzzyMatcher(limit=5, cutoff=60)
    >>> corpus = ["annual_report_2023", "annual_report_2022", "ar2023_en_book"]
    >>> for candidate in matcher.match("Annual_Report_2023", corpus):
    ...     print(f"{candidate.reference_name}: {candidate.score}%")
    annual_report_2023: 100%
    annual_report_2022: 94%
    ar2023_en_book: 82%
"""

from typing import List, Optional, Sequence

from rapidfuzz import fuzz

from retitle.models import MatchCandidate

from .name_normalizer import comparison_key

DEFAULT_LIMIT = 5
DEFAULT_CUTOFF = 60


class FuzzyMatcher:
    """Ranks reference names by similarity to a query name.

    Matching is stateless: the matcher holds only its policy (how many
    candidates to return and the minimum score to accept).

    Attributes:
        limit: Maximum number of candidates returned per query (>= 1).
        cutoff: Minimum score (0-100) a candidate needs to be returned.

    Example:
        >>> matcher = FuzzyMatcher()
        >>> matches = matcher.match("q1_2023_report", ["report_q1_2023"])
        >>> matches[0].score
        100
    """

    # Length range of tokens considered as abbreviations
    _MIN_ABBREVIATION_LENGTH = 2
    _MAX_ABBREVIATION_LENGTH = 5

    def __init__(self, limit: int = DEFAULT_LIMIT, cutoff: int = DEFAULT_CUTOFF) -> None:
        """Initialize the FuzzyMatcher.

        Args:
            limit: Maximum number of candidates to return. Must be >= 1.
                Defaults to 5.
            cutoff: Minimum score for a candidate. Must be between 0 and 100.
                Defaults to 60.

        Raises:
            ValueError: If limit or cutoff is out of range.
        """
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        if not 0 <= cutoff <= 100:
            raise ValueError(f"cutoff must be between 0 and 100, got {cutoff}")
        self.limit = limit
        self.cutoff = cutoff

    def match(self, query: str, corpus: Sequence[str]) -> List[MatchCandidate]:
        """Return the best reference names for ``query``.

        Every corpus entry is scored independently (duplicates included).
        Entries scoring below the cutoff are dropped, the rest are sorted by
        score descending; ties keep corpus order.

        Args:
            query: Candidate name (typically the normalized original filename).
            corpus: Ordered reference names.

        Returns:
            At most ``limit`` MatchCandidate objects. Empty when the query has
            no comparable content, the corpus is empty, or nothing clears the
            cutoff.
        """
        if not comparison_key(query) or not corpus:
            return []

        candidates: List[MatchCandidate] = []
        for reference_name in corpus:
            score = self.score(query, reference_name)
            if score >= self.cutoff:
                candidates.append(MatchCandidate(reference_name=reference_name, score=score))

        # list.sort is stable, so equal scores stay in corpus order
        candidates.sort(key=lambda c: -c.score)
        return candidates[: self.limit]

    def score(self, query: str, reference_name: str) -> int:
        """Score two names on a 0-100 scale.

        Args:
            query: First name.
            reference_name: Second name.

        Returns:
            Integer similarity, 100 for names equal after normalization and
            0 when either name has no comparable content.
        """
        left = comparison_key(query)
        right = comparison_key(reference_name)
        if not left or not right:
            return 0

        best = fuzz.token_sort_ratio(left, right)

        left_tokens = left.split()
        right_tokens = right.split()
        expanded_left = self._expand_abbreviations(left_tokens, right_tokens)
        expanded_right = self._expand_abbreviations(right_tokens, left_tokens)
        if expanded_left != left_tokens or expanded_right != right_tokens:
            best = max(
                best,
                fuzz.token_sort_ratio(" ".join(expanded_left), " ".join(expanded_right)),
            )

        return int(round(best))

    def _expand_abbreviations(self, tokens: List[str], other_tokens: List[str]) -> List[str]:
        """Replace abbreviation tokens by the words of the other name they abbreviate.

        Args:
            tokens: Tokens of the name being expanded.
            other_tokens: Tokens of the name being compared against.

        Returns:
            New token list; unchanged when no token is an abbreviation.

        Example:
            >>> matcher._expand_abbreviations(["ar", "2023"], ["annual", "report", "2023"])
            ['annual', 'report', '2023']
        """
        other_set = set(other_tokens)
        # Sorted so the chosen words do not depend on token order
        other_words = sorted({t for t in other_tokens if t.isalpha() and len(t) > 1})

        expanded: List[str] = []
        for token in tokens:
            if (
                token.isalpha()
                and self._MIN_ABBREVIATION_LENGTH <= len(token) <= self._MAX_ABBREVIATION_LENGTH
                and token not in other_set
            ):
                words = self._words_for_initials(token, other_words)
                if words is not None:
                    expanded.extend(words)
                    continue
            expanded.append(token)
        return expanded

    def _words_for_initials(self, abbreviation: str, words: List[str]) -> Optional[List[str]]:
        """Find distinct words whose initials spell ``abbreviation``.

        Args:
            abbreviation: Candidate abbreviation, e.g. ``"ar"``.
            words: Sorted candidate words.

        Returns:
            The words in abbreviation order, or None if some initial has no
            unused word.
        """
        used: List[str] = []
        for letter in abbreviation:
            word = next(
                (w for w in words if w[0] == letter and w not in used),
                None,
            )
            if word is None:
                return None
            used.append(word)
        return used
