"""Service layer - use cases over the search core."""

from .search_service import HybridSearchService


__all__ = ["HybridSearchService"]
