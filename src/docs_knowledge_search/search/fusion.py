"""Reciprocal Rank Fusion of keyword and vector rankings.

The two rankers score on unrelated scales, so fusion only looks at ranks:
each list adds ``weight / (k + rank + 1)`` for every candidate it contains.
After fusion a freshness multiplier is applied and near-duplicate titles
are collapsed.

When one list is empty there is nothing to fuse: the other list is returned
in its own order with its own scores, minus near-duplicates.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
import re
from typing import Any

from docs_knowledge_search.domain.search import FusedResult
from docs_knowledge_search.search.freshness import DEFAULT_SIGNALS, FreshnessSignal, calculate_freshness_boost
from docs_knowledge_search.search.models import Candidate, VectorCandidate


DEFAULT_RRF_K = 60

_NON_ALNUM = re.compile(r"[^a-z0-9]")


@dataclass(frozen=True)
class FusionWeights:
    keyword: float = 0.4
    vector: float = 0.6


@dataclass
class _FusionEntry:
    title: str
    category: str | None
    rrf_score: float = 0.0
    sources: list[str] = field(default_factory=list)
    keyword_score: float | None = None
    vector_score: float | None = None
    document_id: str | None = None
    source_file: str | None = None
    preview: str | None = None
    entry: Mapping[str, Any] | None = None


def normalize_title(title: str | None) -> str:
    """Collapse a title to lowercase alphanumerics for duplicate detection."""
    if not title:
        return ""
    return _NON_ALNUM.sub("", title.lower())


def rrf_contribution(weight: float, rank: int, k: int = DEFAULT_RRF_K) -> float:
    """Score one list adds for a candidate at 0-based ``rank``."""
    return weight / (k + rank + 1)


def reciprocal_rank_fusion(
    keyword_ranked: Sequence[Candidate],
    vector_ranked: Sequence[VectorCandidate],
    weights: FusionWeights | None = None,
    k: int = DEFAULT_RRF_K,
) -> dict[str, _FusionEntry]:
    """Sum weighted reciprocal ranks per candidate identity.

    Identity is the candidate's title; keyword candidates already carry the
    title probed from their entry, vector candidates without one fall back
    to ``vec-{rank}``.
    """
    active = weights or FusionWeights()
    fused: dict[str, _FusionEntry] = {}

    for rank, candidate in enumerate(keyword_ranked):
        identity = candidate.title or f"{candidate.category or 'item'}-{rank}"
        item = fused.get(identity)
        if item is None:
            item = fused[identity] = _FusionEntry(title=identity, category=candidate.category)
        elif "keyword" in item.sources:
            continue
        item.rrf_score += rrf_contribution(active.keyword, rank, k)
        item.keyword_score = candidate.score
        item.sources.append("keyword")
        item.document_id = item.document_id or candidate.doc_id
        item.source_file = item.source_file or candidate.source_file
        if item.entry is None and candidate.entry is not None:
            item.entry = candidate.entry

    for rank, candidate in enumerate(vector_ranked):
        identity = candidate.title or f"vec-{rank}"
        item = fused.get(identity)
        if item is None:
            item = fused[identity] = _FusionEntry(title=identity, category=candidate.category)
        elif "vector" in item.sources:
            continue
        item.rrf_score += rrf_contribution(active.vector, rank, k)
        item.vector_score = candidate.score
        item.sources.append("vector")
        item.category = item.category or candidate.category
        item.source_file = item.source_file or candidate.source_file
        item.preview = item.preview or candidate.preview
        if item.entry is None and candidate.metadata:
            item.entry = candidate.metadata

    return fused


def _to_result(item: _FusionEntry, signals: Sequence[FreshnessSignal]) -> FusedResult:
    boost = calculate_freshness_boost(item.entry, signals)
    original = min(1.0, item.rrf_score)
    return FusedResult(
        title=item.title,
        category=item.category,
        fused_score=min(1.0, original * (1 + boost)),
        original_score=original,
        sources=tuple(item.sources),
        match_type="both" if len(item.sources) > 1 else item.sources[0],
        keyword_score=item.keyword_score,
        vector_score=item.vector_score,
        freshness_boost=boost,
        document_id=item.document_id,
        source_file=item.source_file,
        preview=item.preview,
        entry=dict(item.entry) if item.entry is not None else None,
    )


def _single_list_result(item: _FusionEntry) -> FusedResult:
    raw = item.keyword_score if item.keyword_score is not None else item.vector_score
    score = min(1.0, max(0.0, raw or 0.0))
    return FusedResult(
        title=item.title,
        category=item.category,
        fused_score=score,
        original_score=score,
        sources=tuple(item.sources),
        match_type=item.sources[0],
        keyword_score=item.keyword_score,
        vector_score=item.vector_score,
        document_id=item.document_id,
        source_file=item.source_file,
        preview=item.preview,
        entry=dict(item.entry) if item.entry is not None else None,
    )


def _is_better(candidate: FusedResult, incumbent: FusedResult) -> bool:
    if candidate.fused_score != incumbent.fused_score:
        return candidate.fused_score > incumbent.fused_score
    return len(candidate.sources) > len(incumbent.sources)


def deduplicate(results: Sequence[FusedResult], *, resort: bool = True) -> list[FusedResult]:
    """Keep the best result per normalized title.

    All results are folded into a map first, so a later, better result
    replaces one that was kept earlier. Titles that normalize to nothing
    (non-Latin scripts) fall back to their lowercase form. With
    ``resort=False`` survivors keep the position of their title's first
    occurrence.
    """
    best: dict[str, FusedResult] = {}
    for result in results:
        key = normalize_title(result.title) or result.title.lower()
        incumbent = best.get(key)
        if incumbent is None or _is_better(result, incumbent):
            best[key] = result
    if not resort:
        return list(best.values())
    return sorted(best.values(), key=lambda result: result.fused_score, reverse=True)


def fuse(
    keyword_ranked: Sequence[Candidate],
    vector_ranked: Sequence[VectorCandidate],
    weights: FusionWeights | None = None,
    k: int = DEFAULT_RRF_K,
    *,
    signals: Sequence[FreshnessSignal] = DEFAULT_SIGNALS,
) -> list[FusedResult]:
    """Fuse both rankings, apply freshness, and collapse near-duplicates.

    If either list is empty the other one is returned as ranked, scored by
    its own ranker and without freshness boosts.
    """
    fused = reciprocal_rank_fusion(keyword_ranked, vector_ranked, weights, k)
    if not keyword_ranked or not vector_ranked:
        return deduplicate([_single_list_result(item) for item in fused.values()], resort=False)
    ranked = sorted(fused.values(), key=lambda item: item.rrf_score, reverse=True)
    boosted = sorted((_to_result(item, signals) for item in ranked), key=lambda r: r.fused_score, reverse=True)
    return deduplicate(boosted)
