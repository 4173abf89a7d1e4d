"""Phrase proximity scoring for multi-word queries.

Documents where matched terms sit close together read like the query, so they
earn a bonus that grows as the gaps shrink.
"""

from __future__ import annotations

from collections.abc import Sequence


PROXIMITY_WINDOW = 10


def proximity_score(positions: Sequence[int], window: int = PROXIMITY_WINDOW) -> float:
    """Return a proximity bonus in [0, 1] for sorted term positions.

    Every gap between consecutive positions that is shorter than ``window``
    contributes ``1 / gap``. Zero gaps (two variants of the same token)
    contribute nothing.
    """
    if len(positions) < 2:
        return 0.0

    ordered = sorted(positions)
    score = 0.0
    for previous, current in zip(ordered, ordered[1:]):
        gap = current - previous
        if 0 < gap < window:
            score += 1.0 / gap
    return min(1.0, score)
