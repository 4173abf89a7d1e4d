"""Error types raised by the knowledge search core."""

from __future__ import annotations


class KnowledgeSearchError(Exception):
    """Base class for all knowledge search errors."""


class CorpusError(KnowledgeSearchError, ValueError):
    """A corpus entry could not be turned into an indexable document."""

    def __init__(self, message: str, *, document_id: str | None = None) -> None:
        super().__init__(message)
        self.document_id = document_id


class VectorUnavailableError(KnowledgeSearchError, RuntimeError):
    """The vector oracle timed out or failed at the transport level."""

    def __init__(self, message: str, *, reason: str = "error") -> None:
        super().__init__(message)
        self.reason = reason


class IndexNotBuiltError(KnowledgeSearchError, RuntimeError):
    """A search was attempted before any index build succeeded."""

    def __init__(self) -> None:
        super().__init__("Search index is not ready: index_corpus() has not completed successfully")
