"""Hybrid search orchestration.

``HybridSearchService`` owns the served index snapshot, runs the keyword and
vector paths concurrently for each query, fuses their rankings and feeds the
analytics collector. It is the public entry point of the package.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
import logging
from pathlib import Path
import time
from typing import Any

from docs_knowledge_search.adapters.analytics_sink import AbstractAnalyticsSink, JsonFileAnalyticsSink
from docs_knowledge_search.adapters.vector_oracle import AbstractVectorOracle, HttpVectorOracle, NullVectorOracle
from docs_knowledge_search.config import Settings
from docs_knowledge_search.corpus import iter_corpus_items
from docs_knowledge_search.domain.search import (
    AnalyticsSummary,
    FusedResult,
    IndexStats,
    KnowledgeGapReport,
    SearchOptions,
    SuggestedExpansion,
)
from docs_knowledge_search.exceptions import IndexNotBuiltError, VectorUnavailableError
from docs_knowledge_search.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEX_SKIPPED,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    VECTOR_FAILURES,
    track_latency,
)
from docs_knowledge_search.observability.tracing import create_span
from docs_knowledge_search.search.analytics import QueryAnalytics
from docs_knowledge_search.search.analyzers import KnowledgeAnalyzer, QueryTerms
from docs_knowledge_search.search.extraction import extract_text
from docs_knowledge_search.search.fusion import FusionWeights, fuse
from docs_knowledge_search.search.index import InvertedIndex
from docs_knowledge_search.search.keyword_ranker import KeywordRanker
from docs_knowledge_search.search.models import Candidate, CorpusItem, Document, VectorCandidate
from docs_knowledge_search.search.synonyms import expand_query


logger = logging.getLogger(__name__)

# Keyword score floor for find_similar when the caller does not set one.
SIMILAR_MIN_SCORE = 0.5
# Entry fields whose values read as topics in suggest_related.
RELATED_TOPIC_FIELDS = ("practice", "feature", "pattern")
_MAX_LIMIT = 100


@dataclass(frozen=True)
class _IndexSnapshot:
    """Everything a query needs, replaced as one reference on rebuild."""

    index: InvertedIndex
    ranker: KeywordRanker
    generation: int


@dataclass(frozen=True)
class _ResolvedOptions:
    limit: int
    min_score: float
    fuzzy: bool
    expand_terms: bool
    vector_timeout: float
    file_filter: frozenset[str] | None
    category_filter: frozenset[str] | None
    keyword_only: bool
    vector_only: bool

    @property
    def mode(self) -> str:
        if self.keyword_only:
            return "keyword"
        if self.vector_only:
            return "vector"
        return "hybrid"


class HybridSearchService:
    """Keyword + vector retrieval over an in-memory knowledge corpus."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        vector_oracle: AbstractVectorOracle | None = None,
        analytics: QueryAnalytics | None = None,
        analytics_sink: AbstractAnalyticsSink | None = None,
        analyzer: KnowledgeAnalyzer | None = None,
    ) -> None:
        """Wire the service from settings, letting callers override collaborators.

        Args:
            settings: Configuration; loaded from the environment when omitted.
            vector_oracle: Similarity backend. Defaults to ``HttpVectorOracle``
                when ``vector_oracle_url`` is set, otherwise ``NullVectorOracle``.
            analytics: Query analytics collector.
            analytics_sink: Destination for ``publish_analytics``.
            analyzer: Text analyzer used to build every index snapshot.
        """
        self.settings = settings or Settings()
        self.vector_oracle = vector_oracle or self._default_oracle(self.settings)
        self.analytics = analytics or QueryAnalytics(
            max_history=self.settings.analytics_history_size,
            gap_capacity=self.settings.knowledge_gap_capacity,
        )
        if analytics_sink is None and self.settings.has_analytics_sink():
            analytics_sink = JsonFileAnalyticsSink(Path(self.settings.analytics_path))
        self.analytics_sink = analytics_sink
        self.analyzer = analyzer
        self.weights = FusionWeights(keyword=self.settings.keyword_weight, vector=self.settings.vector_weight)
        self._snapshot: _IndexSnapshot | None = None

    @staticmethod
    def _default_oracle(settings: Settings) -> AbstractVectorOracle:
        if settings.has_vector_oracle():
            return HttpVectorOracle(settings.vector_oracle_url, timeout=settings.vector_timeout_seconds)
        return NullVectorOracle()

    @property
    def is_ready(self) -> bool:
        return self._snapshot is not None

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    def index_corpus(self, documents: Mapping[str, Any] | Iterable[Document | CorpusItem]) -> IndexStats:
        """Build a new index and swap it in.

        ``documents`` is either a knowledge-base mapping (file name to file
        content) or an iterable of ``Document``/``CorpusItem``. Malformed
        entries are skipped and counted. If the build raises, the previously
        served index stays in place.
        """
        items = iter_corpus_items(documents) if isinstance(documents, Mapping) else documents
        previous = self._snapshot
        generation = previous.generation + 1 if previous else 1

        with create_span("knowledge.index_corpus", attributes={"index.generation": generation}) as span:
            index = InvertedIndex.build(items, analyzer=self.analyzer)
            snapshot = _IndexSnapshot(index=index, ranker=KeywordRanker(index), generation=generation)
            self._snapshot = snapshot
            stats = index.stats()
            span.set_attribute("index.documents", stats.indexed_documents)
            span.set_attribute("index.skipped", stats.skipped_documents)

        INDEX_DOC_COUNT.set(None, stats.indexed_documents)
        if stats.skipped_documents:
            INDEX_SKIPPED.inc(None, stats.skipped_documents)

        return IndexStats(
            indexed_count=stats.indexed_documents,
            unique_term_count=stats.indexed_terms,
            skipped_count=stats.skipped_documents,
            average_terms_per_document=stats.average_terms_per_document,
        )

    def index_stats(self) -> IndexStats:
        """Statistics of the currently served index."""
        snapshot = self._require_snapshot()
        stats = snapshot.index.stats()
        return IndexStats(
            indexed_count=stats.indexed_documents,
            unique_term_count=stats.indexed_terms,
            skipped_count=stats.skipped_documents,
            average_terms_per_document=stats.average_terms_per_document,
        )

    def _require_snapshot(self) -> _IndexSnapshot:
        snapshot = self._snapshot
        if snapshot is None:
            raise IndexNotBuiltError()
        return snapshot

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _resolve(self, options: SearchOptions | None) -> _ResolvedOptions:
        opts = options or SearchOptions()
        settings = self.settings
        return _ResolvedOptions(
            limit=opts.limit if opts.limit is not None else settings.search_max_results,
            min_score=opts.min_score if opts.min_score is not None else settings.search_min_score,
            fuzzy=opts.fuzzy if opts.fuzzy is not None else settings.search_fuzzy_enabled,
            expand_terms=opts.expand_terms if opts.expand_terms is not None else settings.search_expand_terms,
            vector_timeout=opts.vector_timeout or settings.vector_timeout_seconds,
            file_filter=frozenset(opts.file_filter) if opts.file_filter else None,
            category_filter=frozenset(opts.category_filter) if opts.category_filter else None,
            keyword_only=opts.keyword_only,
            vector_only=opts.vector_only,
        )

    async def search(self, query: str, options: SearchOptions | None = None) -> list[FusedResult]:
        """Run a hybrid search.

        The keyword path runs on a worker thread while the vector oracle is
        awaited; both are joined before fusion. A vector failure or timeout
        degrades the query to keyword-only results instead of raising.

        Raises:
            IndexNotBuiltError: no index has been built yet.
        """
        started = time.perf_counter()
        snapshot = self._require_snapshot()
        opts = self._resolve(options)
        keyword_query = expand_query(query) if opts.expand_terms else query

        with (
            create_span(
                "knowledge.search",
                attributes={"search.mode": opts.mode, "index.generation": snapshot.generation},
            ) as span,
            track_latency(SEARCH_LATENCY, mode=opts.mode),
        ):
            SEARCH_REQUESTS.inc({"mode": opts.mode})
            query_terms = snapshot.ranker.tokenize_query(keyword_query, fuzzy=opts.fuzzy)
            if query_terms.is_empty():
                logger.debug("Query normalized to zero terms", extra={"query": query})
                self._record(query, [], expanded=opts.expand_terms, degraded=False, started=started)
                return []

            keyword_ranked, vector_ranked, degraded = await self._gather(
                snapshot, query, keyword_query, query_terms, opts
            )
            keyword_ranked = [c for c in keyword_ranked if self._passes_filters(c, opts)]
            vector_ranked = [c for c in vector_ranked if self._passes_filters(c, opts)]

            results = fuse(keyword_ranked, vector_ranked, self.weights, self.settings.rrf_k)[: opts.limit]
            span.set_attribute("search.result_count", len(results))
            span.set_attribute("search.degraded", degraded)

        self._record(query, results, expanded=opts.expand_terms, degraded=degraded, started=started)
        return results

    async def _gather(
        self,
        snapshot: _IndexSnapshot,
        query: str,
        keyword_query: str,
        query_terms: QueryTerms,
        opts: _ResolvedOptions,
    ) -> tuple[list[Candidate], list[VectorCandidate], bool]:
        fetch = opts.limit * 2

        async def keyword_path() -> list[Candidate]:
            if opts.vector_only:
                return []
            return await asyncio.to_thread(
                snapshot.ranker.rank, query_terms, keyword_query, min_score=opts.min_score, limit=fetch
            )

        async def vector_path() -> tuple[list[VectorCandidate], bool]:
            if opts.keyword_only or not self.vector_oracle.available:
                return [], False
            try:
                # Embeddings see the raw query; abbreviation expansion only helps the keyword path.
                candidates = await asyncio.wait_for(self.vector_oracle.query(query, fetch), opts.vector_timeout)
            except asyncio.TimeoutError:
                self._vector_failed("timeout", f"no answer within {opts.vector_timeout}s")
                return [], True
            except VectorUnavailableError as exc:
                self._vector_failed(exc.reason, str(exc))
                return [], True
            return list(candidates), False

        keyword_ranked, (vector_ranked, degraded) = await asyncio.gather(keyword_path(), vector_path())
        return keyword_ranked, vector_ranked, degraded

    @staticmethod
    def _vector_failed(reason: str, detail: str) -> None:
        logger.warning("Vector search unavailable, degrading to keyword-only: %s", detail, extra={"reason": reason})
        VECTOR_FAILURES.inc({"reason": reason})

    @staticmethod
    def _passes_filters(candidate: Candidate | VectorCandidate, opts: _ResolvedOptions) -> bool:
        if opts.file_filter is not None and candidate.source_file not in opts.file_filter:
            return False
        if opts.category_filter is not None and candidate.category not in opts.category_filter:
            return False
        return True

    def _record(
        self,
        query: str,
        results: Sequence[FusedResult],
        *,
        expanded: bool,
        degraded: bool,
        started: float,
    ) -> None:
        elapsed_ms = (time.perf_counter() - started) * 1000
        try:
            self.analytics.record(
                query, results, expanded=expanded, degraded=degraded, response_time_ms=elapsed_ms
            )
        except Exception:
            logger.exception("Failed to record search analytics")

    # ------------------------------------------------------------------
    # Related content
    # ------------------------------------------------------------------

    async def find_similar(
        self,
        content: str | Mapping[str, Any],
        options: SearchOptions | None = None,
    ) -> list[FusedResult]:
        """Search for entries resembling ``content``.

        A mapping is flattened the same way entries are at index time. The
        keyword score floor defaults to ``SIMILAR_MIN_SCORE`` instead of the
        configured minimum.
        """
        text = content if isinstance(content, str) else extract_text(content)
        opts = options or SearchOptions()
        if opts.min_score is None:
            opts = opts.model_copy(update={"min_score": SIMILAR_MIN_SCORE})
        return await self.search(text, opts)

    async def suggest_related(self, query: str, count: int = 5) -> list[str]:
        """Topics related to ``query``: categories and subject fields of its top hits.

        Topics keep the order in which the ranking first mentions them.
        """
        if count < 1:
            return []
        results = await self.search(query, SearchOptions(limit=min(count * 2, _MAX_LIMIT)))

        topics: dict[str, None] = {}
        for result in results:
            if result.category:
                topics.setdefault(result.category, None)
            entry = result.entry or {}
            for name in RELATED_TOPIC_FIELDS:
                value = entry.get(name)
                if isinstance(value, Mapping):
                    value = value.get("name")
                if isinstance(value, str) and value:
                    topics.setdefault(value, None)
        return list(topics)[:count]

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    def get_analytics_summary(self) -> AnalyticsSummary:
        return self.analytics.summary()

    def get_suggested_expansions(self, limit: int = 10) -> list[SuggestedExpansion]:
        return self.analytics.suggested_expansions(limit)

    def get_knowledge_gaps(self) -> KnowledgeGapReport:
        return self.analytics.knowledge_gaps()

    def publish_analytics(self) -> bool:
        """Push the current summary to the analytics sink.

        Returns False when no sink is configured or the sink failed.
        """
        if self.analytics_sink is None:
            return False
        try:
            self.analytics_sink.publish(self.analytics.summary())
        except Exception:
            logger.exception("Failed to publish analytics snapshot")
            return False
        return True

    async def aclose(self) -> None:
        await self.vector_oracle.aclose()
