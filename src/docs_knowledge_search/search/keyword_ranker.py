"""TF-IDF style keyword ranking over an inverted index snapshot."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from docs_knowledge_search.search.analyzers import QueryTerms
from docs_knowledge_search.search.extraction import extract_title, important_field_values
from docs_knowledge_search.search.fuzzy import FuzzyMatcher
from docs_knowledge_search.search.index import InvertedIndex
from docs_knowledge_search.search.models import Candidate, Document, TermMatches
from docs_knowledge_search.search.phrase import proximity_score
from docs_knowledge_search.search.stats import coverage, normalized_idf


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeywordWeights:
    """Relative weights and flat bonuses of the keyword score."""

    coverage: float = 0.40
    idf: float = 0.25
    proximity: float = 0.15
    exact_phrase_bonus: float = 0.20
    important_field_bonus: float = 0.15


class KeywordRanker:
    """Score documents of one index snapshot against a parsed query."""

    def __init__(
        self,
        index: InvertedIndex,
        *,
        weights: KeywordWeights | None = None,
    ) -> None:
        self.index = index
        self.weights = weights or KeywordWeights()
        self.fuzzy_matcher = FuzzyMatcher(index.vocabulary)

    def tokenize_query(self, text: str, *, fuzzy: bool = True) -> QueryTerms:
        """Normalize and expand a query, adding fuzzy variants for unknown terms."""
        query_terms = self.index.analyzer.query_terms(text)
        if query_terms.is_empty() or not fuzzy:
            return query_terms

        unknown = [base for base in query_terms.base_terms if not self.index.has_term(base)]
        fuzzy_variants = self.fuzzy_matcher.expand(unknown)
        if not fuzzy_variants:
            return query_terms

        logger.debug("Fuzzy expansion applied", extra={"fuzzy_variants": fuzzy_variants})
        return query_terms.with_variants(fuzzy_variants)

    def rank(
        self,
        query_terms: QueryTerms,
        original_query: str,
        *,
        min_score: float = 0.0,
        limit: int | None = None,
    ) -> list[Candidate]:
        """Return candidates scored in [0, 1], best first.

        Python's sort is stable, so documents with equal scores keep the
        corpus order produced by ``InvertedIndex.candidates``.
        """
        if query_terms.is_empty():
            return []

        query_lower = original_query.lower().strip()
        scored: list[Candidate] = []
        for match in self.index.candidates(query_terms.terms):
            document = self.index.get_document(match.doc_id)
            if document is None:
                continue
            score = self.score(document, match, query_terms, query_lower)
            if score < min_score:
                continue
            scored.append(
                Candidate(
                    title=extract_title(document.raw_fields) or f"{document.category or 'item'}-{document.id}",
                    score=score,
                    source_type="keyword",
                    doc_id=document.id,
                    category=document.category,
                    source_file=document.source_file,
                    matched_terms=match.matched_terms,
                    entry=document.raw_fields,
                )
            )

        scored.sort(key=lambda candidate: candidate.score, reverse=True)
        if limit is not None:
            return scored[: max(limit, 0)]
        return scored

    def score(self, document: Document, match: TermMatches, query_terms: QueryTerms, query_lower: str) -> float:
        """Weighted relevance of one document, clamped to [0, 1]."""
        weights = self.weights
        matched = set(match.matched_terms)

        covered = sum(1 for _base, variants in query_terms.groups if matched.intersection(variants))
        score = coverage(covered, len(query_terms.groups)) * weights.coverage

        doc_freqs = [self.index.document_frequency(term) for term in match.matched_terms]
        score += normalized_idf(doc_freqs, self.index.doc_count) * weights.idf

        score += proximity_score(match.positions) * weights.proximity

        if query_lower:
            if query_lower in document.extracted_text.lower():
                score += weights.exact_phrase_bonus
            if any(query_lower in value.lower() for value in important_field_values(document.raw_fields)):
                score += weights.important_field_bonus

        return min(1.0, max(0.0, score))
