"""Domain models for hybrid knowledge search.

Value objects are immutable (frozen=True) and carry no infrastructure
dependencies. They describe what callers send in and what they get back.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


MatchType = Literal["keyword", "vector", "both"]


class SearchOptions(BaseModel):
    """Per-query knobs. ``None`` means "use the configured default"."""

    model_config = ConfigDict(frozen=True)

    limit: int | None = Field(default=None, ge=1, le=100)
    min_score: float | None = Field(default=None, ge=0.0, le=1.0)
    fuzzy: bool | None = None
    expand_terms: bool | None = None
    file_filter: list[str] | None = None
    category_filter: list[str] | None = None
    keyword_only: bool = False
    vector_only: bool = False
    vector_timeout: float | None = Field(default=None, gt=0)


class FusedResult(BaseModel):
    """One entry of the final ranking.

    ``original_score`` is the raw Reciprocal Rank Fusion score and
    ``fused_score`` the same value after the freshness multiplier.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    category: str | None = None
    fused_score: float = Field(ge=0.0, le=1.0)
    original_score: float = Field(ge=0.0, le=1.0)
    sources: tuple[Literal["keyword", "vector"], ...]
    match_type: MatchType
    keyword_score: float | None = None
    vector_score: float | None = None
    freshness_boost: float = 0.0
    document_id: str | None = None
    source_file: str | None = None
    preview: str | None = None
    entry: dict[Any, Any] | None = None


class IndexStats(BaseModel):
    """Outcome of an ``index_corpus`` call."""

    model_config = ConfigDict(frozen=True)

    indexed_count: int
    unique_term_count: int
    skipped_count: int = 0
    average_terms_per_document: float = 0.0


class TermCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    term: str
    count: int


class RecentQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: str
    results: int
    time: str
    response_time_ms: float = 0.0


class AnalyticsSummary(BaseModel):
    """Reporting snapshot of query analytics."""

    model_config = ConfigDict(frozen=True)

    total_queries: int
    avg_results: float
    hit_rate: float
    avg_response_time_ms: float = 0.0
    top_terms: list[TermCount] = Field(default_factory=list)
    match_type_distribution: dict[str, int] = Field(default_factory=dict)
    knowledge_gaps: list[str] = Field(default_factory=list)
    recent_queries: list[RecentQuery] = Field(default_factory=list)
    vector_degraded: int = 0


class SuggestedExpansion(BaseModel):
    """A pair of terms that users often search together."""

    model_config = ConfigDict(frozen=True)

    terms: tuple[str, str]
    count: int


class KnowledgeGapReport(BaseModel):
    """Zero-result queries and what they suggest about corpus coverage."""

    model_config = ConfigDict(frozen=True)

    missed_queries: list[str]
    miss_rate: float
    suggestion: str | None = None
