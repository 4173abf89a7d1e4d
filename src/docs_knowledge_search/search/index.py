"""In-memory inverted index over knowledge documents.

An ``InvertedIndex`` is an immutable snapshot: ``build`` always produces a
fresh index from the complete corpus and callers swap the reference they
serve. Nothing ever patches an existing index, so the document-frequency table
can never drift from the postings it was derived from.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
import logging
from types import MappingProxyType

from docs_knowledge_search.exceptions import CorpusError
from docs_knowledge_search.search.analyzers import KnowledgeAnalyzer, get_analyzer
from docs_knowledge_search.search.models import CorpusItem, Document, Posting, TermMatches


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexStatistics:
    """Summary numbers describing one index build."""

    indexed_documents: int
    indexed_terms: int
    skipped_documents: int

    @property
    def average_terms_per_document(self) -> float:
        if self.indexed_documents == 0:
            return 0.0
        return round(self.indexed_terms / self.indexed_documents, 1)


class InvertedIndex:
    """Term -> postings lookup plus the documents they point to."""

    def __init__(
        self,
        documents: Sequence[Document],
        postings: Mapping[str, tuple[Posting, ...]],
        *,
        skipped_count: int = 0,
        analyzer: KnowledgeAnalyzer | None = None,
    ) -> None:
        self._documents: Mapping[str, Document] = MappingProxyType({doc.id: doc for doc in documents})
        self._ordinals: Mapping[str, int] = MappingProxyType({doc.id: idx for idx, doc in enumerate(documents)})
        self._postings: Mapping[str, tuple[Posting, ...]] = MappingProxyType(dict(postings))
        self._document_frequency: Mapping[str, int] = MappingProxyType(
            {term: len({posting.doc_id for posting in term_postings}) for term, term_postings in postings.items()}
        )
        self._vocabulary = tuple(sorted(self._postings))
        self.skipped_count = skipped_count
        self.analyzer = analyzer or get_analyzer()

    @classmethod
    def build(
        cls,
        items: Iterable[Document | CorpusItem],
        *,
        analyzer: KnowledgeAnalyzer | None = None,
    ) -> InvertedIndex:
        """Build a new index from the complete corpus.

        Malformed entries are skipped and counted; they never abort the
        build. Identical input always produces identical postings.
        """
        active_analyzer = analyzer or get_analyzer()
        documents: list[Document] = []
        seen_ids: set[str] = set()
        postings: dict[str, list[Posting]] = defaultdict(list)
        skipped = 0

        for item in items:
            try:
                document = cls._coerce_document(item, seen_ids)
            except CorpusError as exc:
                skipped += 1
                logger.warning("Skipping un-indexable corpus entry: %s", exc, extra={"document_id": exc.document_id})
                continue

            seen_ids.add(document.id)
            documents.append(document)
            for token in active_analyzer.index_tokens(document.extracted_text):
                postings[token.text].append(Posting(term=token.text, doc_id=document.id, position=token.position))

        frozen_postings = {term: tuple(term_postings) for term, term_postings in postings.items()}
        index = cls(documents, frozen_postings, skipped_count=skipped, analyzer=active_analyzer)
        logger.info(
            "Indexing complete: %d entries, %d unique terms, %d skipped",
            index.doc_count,
            len(index.vocabulary),
            skipped,
        )
        return index

    @staticmethod
    def _coerce_document(item: Document | CorpusItem, seen_ids: set[str]) -> Document:
        document = item if isinstance(item, Document) else item.to_document()
        if not document.extracted_text.strip():
            raise CorpusError(f"Document {document.id} has no text content", document_id=document.id)
        if document.id in seen_ids:
            raise CorpusError(f"Duplicate document id {document.id}", document_id=document.id)
        return document

    @property
    def doc_count(self) -> int:
        return len(self._documents)

    @property
    def vocabulary(self) -> tuple[str, ...]:
        """All indexed terms, sorted."""
        return self._vocabulary

    def has_term(self, term: str) -> bool:
        return term in self._postings

    def document_frequency(self, term: str) -> int:
        return self._document_frequency.get(term, 0)

    def get_document(self, doc_id: str) -> Document | None:
        return self._documents.get(doc_id)

    def documents(self) -> list[Document]:
        """Indexed documents in build order."""
        return sorted(self._documents.values(), key=lambda doc: self._ordinals[doc.id])

    def postings_for(self, term: str) -> tuple[Posting, ...]:
        return self._postings.get(term, ())

    def postings_snapshot(self) -> tuple[tuple[str, tuple[Posting, ...]], ...]:
        """Every posting list keyed by term in sorted order."""
        return tuple((term, self._postings[term]) for term in self._vocabulary)

    def candidates(self, terms: Iterable[str]) -> list[TermMatches]:
        """Collect matched terms and positions for every document hit by ``terms``.

        Results follow corpus order so equal scores later keep a stable,
        insertion-based order.
        """
        matched: dict[str, dict[str, None]] = defaultdict(dict)
        positions: dict[str, list[int]] = defaultdict(list)
        for term in dict.fromkeys(terms):
            for posting in self._postings.get(term, ()):
                matched[posting.doc_id].setdefault(term, None)
                positions[posting.doc_id].append(posting.position)

        return [
            TermMatches(doc_id=doc_id, matched_terms=tuple(matched[doc_id]), positions=tuple(sorted(positions[doc_id])))
            for doc_id in sorted(matched, key=self._ordinals.__getitem__)
        ]

    def stats(self) -> IndexStatistics:
        return IndexStatistics(
            indexed_documents=self.doc_count,
            indexed_terms=len(self._vocabulary),
            skipped_documents=self.skipped_count,
        )
