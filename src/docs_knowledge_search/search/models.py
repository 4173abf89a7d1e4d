"""Search data models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import math
from types import MappingProxyType
from typing import Any, Literal

from docs_knowledge_search.exceptions import CorpusError
from docs_knowledge_search.search.extraction import extract_text


SourceType = Literal["keyword", "vector"]


@dataclass(frozen=True)
class Document:
    """An indexable knowledge entry.

    Built once per corpus item and never mutated afterwards; ``raw_fields``
    is exposed through a read-only mapping proxy.
    """

    id: str
    source_file: str
    category: str | None
    raw_fields: Mapping[str, Any]
    extracted_text: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.raw_fields, MappingProxyType):
            object.__setattr__(self, "raw_fields", MappingProxyType(dict(self.raw_fields)))


@dataclass(frozen=True)
class CorpusItem:
    """A raw corpus entry together with where it came from."""

    source_file: str
    category: str | None
    entry: Any
    ordinal: int

    def default_id(self) -> str:
        return f"{self.source_file}:{self.category or 'items'}:{self.ordinal}"

    def to_document(self) -> Document:
        """Build a ``Document``, raising ``CorpusError`` when the entry is unusable."""
        if not isinstance(self.entry, Mapping):
            raise CorpusError(
                f"Entry {self.default_id()} is {type(self.entry).__name__}, expected a mapping",
                document_id=self.default_id(),
            )
        metadata = self.entry.get("_metadata")
        doc_id = self.default_id()
        if isinstance(metadata, Mapping) and metadata.get("id"):
            doc_id = str(metadata["id"])
        text = extract_text(self.entry)
        if not text.strip():
            raise CorpusError(f"Entry {doc_id} has no text content", document_id=doc_id)
        return Document(
            id=doc_id,
            source_file=self.source_file,
            category=self.category,
            raw_fields=self.entry,
            extracted_text=text,
        )


@dataclass(frozen=True)
class Posting:
    """A posting represents one term occurrence in a document."""

    term: str
    doc_id: str
    position: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"term": self.term, "doc_id": self.doc_id, "position": self.position}


@dataclass(frozen=True)
class TermMatches:
    """Query terms found in one document, with every matching position."""

    doc_id: str
    matched_terms: tuple[str, ...]
    positions: tuple[int, ...]


@dataclass(frozen=True)
class Candidate:
    """A scored match produced by either ranking system."""

    title: str
    score: float
    source_type: SourceType
    doc_id: str | None = None
    category: str | None = None
    source_file: str | None = None
    matched_terms: tuple[str, ...] = ()
    entry: Mapping[str, Any] | None = None
    preview: str | None = None


@dataclass(frozen=True)
class VectorCandidate:
    """One nearest-neighbour hit reported by the vector oracle."""

    title: str
    score: float
    category: str | None = None
    preview: str | None = None
    source_file: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> VectorCandidate:
        """Create from a loosely shaped dictionary.

        Raises:
            ValueError, TypeError: a field has a value no oracle row should carry.
        """
        score = float(data.get("score") or 0.0)
        if not math.isfinite(score):
            raise ValueError(f"score must be finite, got {score}")
        metadata = data.get("metadata") or {}
        if not isinstance(metadata, Mapping):
            raise ValueError(f"metadata must be an object, got {type(metadata).__name__}")
        return cls(
            title=_optional_text(data.get("title"), "title") or "",
            score=score,
            category=_optional_text(data.get("category"), "category"),
            preview=_optional_text(data.get("preview"), "preview"),
            source_file=_optional_text(data.get("source_file") or data.get("source"), "source_file"),
            metadata=dict(metadata),
        )


def _optional_text(value: Any, name: str) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError(f"{name} must be a string, got {type(value).__name__}")
