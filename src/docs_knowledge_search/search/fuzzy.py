"""Fuzzy matching for typo-tolerant search.

This module provides edit distance calculation and fuzzy term matching
for handling typos in search queries.

Smart Defaults:
- No fuzzy matching for terms shorter than 4 chars
- Max edit distance of 1 for terms shorter than 7 chars
- Max edit distance of 2 for longer terms
- Only terms missing from the index are fuzzed
"""

from __future__ import annotations

from collections.abc import Sequence


MIN_FUZZY_TERM_LENGTH = 4


def levenshtein_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    Keeps two rows sized to the shorter string, with optional early
    termination when distance exceeds max_distance.

    Args:
        s1: First string.
        s2: Second string.
        max_distance: If provided, return max_distance+1 early when
            distance is guaranteed to exceed this threshold.

    Returns:
        The minimum number of single-character edits (insertions,
        deletions, substitutions) needed to change s1 into s2.
        If max_distance is set and exceeded, returns max_distance+1.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("micorflow", "microflow")
        2
        >>> levenshtein_distance("", "abc")
        3
    """
    if s1 == s2:
        return 0
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    # Use shorter string as columns for space efficiency
    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)

    # Early check: if length difference exceeds max_distance, skip
    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    # Only need two rows at a time
    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        row_min = curr_row[0]  # Track minimum in current row for early exit
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,  # deletion
                curr_row[i - 1] + 1,  # insertion
                prev_row[i - 1] + cost,  # substitution
            )
            row_min = min(row_min, curr_row[i])

        # Early termination: if minimum possible distance exceeds max, bail out
        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


def get_max_edit_distance(term_length: int) -> int:
    """Get the maximum allowed edit distance for a term based on its length.

    - under 4 chars: no fuzzy matching (too many false positives)
    - 4-6 chars: max 1 edit
    - 7+ chars: max 2 edits
    """
    if term_length < MIN_FUZZY_TERM_LENGTH:
        return 0
    if term_length < 7:
        return 1
    return 2


def find_fuzzy_matches(
    query_term: str,
    vocabulary: Sequence[str],
    max_distance: int | None = None,
) -> list[tuple[str, int]]:
    """Find vocabulary terms within ``max_distance`` edits of the query term.

    The scan is bounded to one distance computation per vocabulary term and
    most candidates are pruned before that: terms whose length differs by
    more than ``max_distance`` are skipped, and for single-edit lookups on
    terms longer than five characters the first character must match.

    Args:
        query_term: The term to match (may contain typo).
        vocabulary: Indexed terms to match against, already normalized.
        max_distance: Maximum edit distance allowed. If None, uses
            smart default based on term length.

    Returns:
        List of (matching_term, edit_distance) tuples sorted by distance,
        then alphabetically. Exact matches are never included.
    """
    if len(query_term) < MIN_FUZZY_TERM_LENGTH or not vocabulary:
        return []

    if max_distance is None:
        max_distance = get_max_edit_distance(len(query_term))
    if max_distance <= 0:
        return []

    check_first_char = max_distance == 1 and len(query_term) > 5
    first_char = query_term[0]
    matches: list[tuple[str, int]] = []

    for term in vocabulary:
        # Quick check: if length difference exceeds max_distance, skip
        if abs(len(query_term) - len(term)) > max_distance:
            continue
        if check_first_char and term[:1] != first_char:
            continue

        distance = levenshtein_distance(query_term, term, max_distance)
        if 0 < distance <= max_distance:
            matches.append((term, distance))

    matches.sort(key=lambda x: (x[1], x[0]))
    return matches


class FuzzyMatcher:
    """Typo fallback bound to one index vocabulary."""

    def __init__(self, vocabulary: Sequence[str]) -> None:
        self._vocabulary = tuple(vocabulary)
        self._known = frozenset(self._vocabulary)

    def fuzzy_matches(self, term: str, max_distance: int | None = None) -> list[str]:
        """Return in-vocabulary terms within ``max_distance`` edits of ``term``."""
        return [match for match, _distance in find_fuzzy_matches(term, self._vocabulary, max_distance)]

    def expand(self, terms: Sequence[str]) -> dict[str, list[str]]:
        """Map each out-of-vocabulary term to its fuzzy matches.

        Terms already in the vocabulary, and terms too short to fuzz, are
        left out of the result.
        """
        expanded: dict[str, list[str]] = {}
        for term in terms:
            if term in self._known or len(term) < MIN_FUZZY_TERM_LENGTH:
                continue
            matches = self.fuzzy_matches(term)
            if matches:
                expanded[term] = matches
        return expanded
