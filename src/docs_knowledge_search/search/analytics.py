"""Query analytics: what users search for and where the corpus falls short.

Every search records one ``AnalyticsRecord``. The collector keeps a bounded
ring buffer of recent records, a term-frequency counter, term co-occurrence
counts used to suggest new synonym expansions, and a de-duplicated set of
zero-result queries ("knowledge gaps").

All state sits behind a single lock. Counters are monotone approximations
and the collector never raises into the query path on its own; callers still
wrap ``record`` so an unexpected failure cannot fail a search.
"""

from __future__ import annotations

from collections import Counter, OrderedDict, deque
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from itertools import combinations
import logging
import threading

from docs_knowledge_search.domain.search import (
    AnalyticsSummary,
    FusedResult,
    KnowledgeGapReport,
    RecentQuery,
    SuggestedExpansion,
    TermCount,
)


logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 1000
DEFAULT_GAP_CAPACITY = 100
_SUMMARY_TAIL = 10
_TOP_TERMS = 20
_TOP_PAIRS = 10
# Response times are averaged over the most recent queries only.
_RESPONSE_TIME_WINDOW = 100


@dataclass(frozen=True)
class AnalyticsRecord:
    """One observed query."""

    query: str
    timestamp: str
    result_count: int
    top_score: float
    match_types: tuple[str, ...] = ()
    expanded: bool = False
    degraded: bool = False
    response_time_ms: float = 0.0


@dataclass
class _Totals:
    queries: int = 0
    hits: int = 0
    misses: int = 0
    degraded: int = 0
    match_types: Counter[str] = field(default_factory=Counter)


class QueryAnalytics:
    """Thread-safe accumulator of query statistics."""

    def __init__(
        self,
        max_history: int = DEFAULT_HISTORY_SIZE,
        gap_capacity: int = DEFAULT_GAP_CAPACITY,
    ) -> None:
        self.max_history = max_history
        self.gap_capacity = gap_capacity
        self._lock = threading.Lock()
        self._reset_state()

    def _reset_state(self) -> None:
        self._records: deque[AnalyticsRecord] = deque(maxlen=self.max_history)
        self._term_frequency: Counter[str] = Counter()
        self._cooccurrence: Counter[tuple[str, str]] = Counter()
        self._zero_result: OrderedDict[str, None] = OrderedDict()
        self._totals = _Totals()

    def record(
        self,
        query: str,
        results: Sequence[FusedResult],
        *,
        expanded: bool = False,
        degraded: bool = False,
        response_time_ms: float = 0.0,
    ) -> AnalyticsRecord:
        """Record a query, the results it produced and how long it took."""
        normalized = query.lower().strip()
        terms = normalized.split()
        record = AnalyticsRecord(
            query=normalized,
            timestamp=datetime.now(timezone.utc).isoformat(),
            result_count=len(results),
            top_score=results[0].fused_score if results else 0.0,
            match_types=tuple(result.match_type for result in results),
            expanded=expanded,
            degraded=degraded,
            response_time_ms=max(0.0, response_time_ms),
        )

        gap_detected = False
        with self._lock:
            self._records.append(record)
            self._totals.queries += 1
            self._totals.match_types.update(record.match_types)
            if degraded:
                self._totals.degraded += 1
            self._term_frequency.update(terms)
            self._cooccurrence.update(
                (first, second) if first <= second else (second, first)
                for first, second in combinations(dict.fromkeys(terms), 2)
            )
            if results:
                self._totals.hits += 1
            else:
                self._totals.misses += 1
                gap_detected = self._remember_gap(normalized)

        if gap_detected:
            logger.info("Knowledge gap detected", extra={"query": normalized})
        return record

    def _remember_gap(self, query: str) -> bool:
        if not query or query in self._zero_result:
            return False
        self._zero_result[query] = None
        while len(self._zero_result) > self.gap_capacity:
            self._zero_result.popitem(last=False)
        return True

    def summary(self) -> AnalyticsSummary:
        """Snapshot for reporting."""
        with self._lock:
            records = list(self._records)
            top_terms = self._term_frequency.most_common(_TOP_TERMS)
            gaps = list(self._zero_result)
            totals = self._totals
            total_queries = totals.queries
            hits = totals.hits
            degraded = totals.degraded
            distribution = {"both": 0, "keyword": 0, "vector": 0, **totals.match_types}

        avg_results = sum(r.result_count for r in records) / len(records) if records else 0.0
        timed = records[-_RESPONSE_TIME_WINDOW:]
        avg_response_time = sum(r.response_time_ms for r in timed) / len(timed) if timed else 0.0
        hit_rate = hits / total_queries * 100 if total_queries else 0.0
        return AnalyticsSummary(
            total_queries=total_queries,
            avg_results=round(avg_results, 1),
            hit_rate=round(hit_rate, 1),
            avg_response_time_ms=round(avg_response_time, 2),
            top_terms=[TermCount(term=term, count=count) for term, count in top_terms],
            match_type_distribution=distribution,
            knowledge_gaps=gaps[-_SUMMARY_TAIL:],
            recent_queries=[
                RecentQuery(
                    query=r.query,
                    results=r.result_count,
                    time=r.timestamp,
                    response_time_ms=r.response_time_ms,
                )
                for r in records[-_SUMMARY_TAIL:]
            ],
            vector_degraded=degraded,
        )

    def suggested_expansions(self, limit: int = _TOP_PAIRS) -> list[SuggestedExpansion]:
        """Term pairs that appear together most often."""
        with self._lock:
            pairs = self._cooccurrence.most_common(limit)
        return [SuggestedExpansion(terms=pair, count=count) for pair, count in pairs]

    def knowledge_gaps(self) -> KnowledgeGapReport:
        """All retained zero-result queries plus a coverage hint."""
        with self._lock:
            gaps = list(self._zero_result)
            total = self._totals.queries
            misses = self._totals.misses

        suggestion = None
        if len(gaps) > 5:
            suggestion = "Consider adding knowledge for: " + ", ".join(gaps[-5:])
        return KnowledgeGapReport(
            missed_queries=gaps,
            miss_rate=round(misses / total * 100, 1) if total else 0.0,
            suggestion=suggestion,
        )

    def records(self) -> list[AnalyticsRecord]:
        with self._lock:
            return list(self._records)

    def reset(self) -> None:
        with self._lock:
            self._reset_state()
        logger.info("Search analytics reset")
