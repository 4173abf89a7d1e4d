"""Domain layer - request and response value objects of the search service.

Models are immutable pydantic objects with no infrastructure dependencies.
"""

from docs_knowledge_search.domain.search import (
    AnalyticsSummary,
    FusedResult,
    IndexStats,
    KnowledgeGapReport,
    RecentQuery,
    SearchOptions,
    SuggestedExpansion,
    TermCount,
)


__all__ = [
    "AnalyticsSummary",
    "FusedResult",
    "IndexStats",
    "KnowledgeGapReport",
    "RecentQuery",
    "SearchOptions",
    "SuggestedExpansion",
    "TermCount",
]
