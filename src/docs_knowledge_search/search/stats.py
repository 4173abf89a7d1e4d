"""Statistical helpers for keyword relevance scoring.

The functions here stay independent of the index so they can be unit tested
in isolation and reused by other rankers.
"""

from __future__ import annotations

from collections.abc import Iterable
import math


def calculate_idf(doc_freq: int, total_docs: int) -> float:
    """Return the smoothed inverse document frequency ``log((N+1)/(df+1))``.

    Never negative: ``df`` is clamped to ``[0, N]``.
    """
    if total_docs <= 0:
        return 0.0
    df = max(0, min(doc_freq, total_docs))
    return math.log((total_docs + 1) / (df + 1))


def normalized_idf(doc_freqs: Iterable[int], total_docs: int) -> float:
    """Average IDF of the matched terms scaled into [0, 1] by index size.

    The upper bound ``log(N+1)`` is the IDF a term would have with a
    document frequency of zero, so the ratio never exceeds one.
    """
    freqs = list(doc_freqs)
    if not freqs or total_docs <= 0:
        return 0.0
    average = sum(calculate_idf(df, total_docs) for df in freqs) / len(freqs)
    ceiling = math.log(total_docs + 1)
    if ceiling <= 0:
        return 0.0
    return min(1.0, average / ceiling)


def coverage(matched_groups: int, total_groups: int) -> float:
    """Fraction of query terms a document matched."""
    if total_groups <= 0:
        return 0.0
    return min(1.0, matched_groups / total_groups)
