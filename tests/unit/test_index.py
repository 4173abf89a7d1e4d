"""Unit tests for the in-memory inverted index."""

import logging

import pytest

from docs_knowledge_search.corpus import iter_corpus_items
from docs_knowledge_search.search.index import IndexStatistics, InvertedIndex
from docs_knowledge_search.search.models import CorpusItem, Document


@pytest.mark.unit
class TestInvertedIndexBuild:
    def test_assigns_metadata_ids_and_generated_ids(self, sample_knowledge_base):
        index = InvertedIndex.build(iter_corpus_items(sample_knowledge_base))

        assert [doc.id for doc in index.documents()] == [
            "bp-commit",
            "best-practices:microflows:1",
            "best-practices:security:0",
            "sdk-patterns:items:0",
        ]
        assert index.get_document("bp-commit").category == "microflows"
        assert index.get_document("sdk-patterns:items:0").category is None

    def test_identical_corpora_yield_identical_postings(self, sample_knowledge_base):
        first = InvertedIndex.build(iter_corpus_items(sample_knowledge_base))
        second = InvertedIndex.build(iter_corpus_items(sample_knowledge_base))

        assert first.postings_snapshot() == second.postings_snapshot()
        assert first.vocabulary == second.vocabulary

    def test_malformed_entries_are_skipped_and_counted(self, caplog):
        knowledge_base = {
            "mixed": {
                "items": [
                    "just a string",
                    {},
                    {"count": 3},
                    {"title": "Valid entry"},
                    {"title": "First copy", "_metadata": {"id": "dup"}},
                    {"title": "Second copy", "_metadata": {"id": "dup"}},
                ]
            }
        }

        with caplog.at_level(logging.WARNING, logger="docs_knowledge_search.search.index"):
            index = InvertedIndex.build(iter_corpus_items(knowledge_base))

        assert index.doc_count == 2
        assert index.skipped_count == 4
        assert index.get_document("dup").raw_fields["title"] == "First copy"
        assert sum("Skipping un-indexable" in record.getMessage() for record in caplog.records) == 4

    def test_accepts_documents_directly(self):
        docs = [
            Document(id="a", source_file="f", category=None, raw_fields={"t": "x"}, extracted_text="Page layouts"),
            Document(id="b", source_file="f", category=None, raw_fields={"t": "y"}, extracted_text="   "),
        ]

        index = InvertedIndex.build(docs)

        assert index.doc_count == 1
        assert index.skipped_count == 1
        assert index.has_term("layout")

    def test_empty_corpus(self):
        index = InvertedIndex.build([])

        assert index.doc_count == 0
        assert index.vocabulary == ()
        assert index.candidates(["anything"]) == []


@pytest.mark.unit
class TestInvertedIndexLookups:
    @pytest.fixture
    def index(self, scenario_knowledge_base):
        return InvertedIndex.build(iter_corpus_items(scenario_knowledge_base))

    def test_positions_skip_stopwords(self, index):
        postings = {p.term: p.position for p in index.postings_for("actions")}

        assert postings == {"actions": 3}
        assert [(p.doc_id, p.position) for p in index.postings_for("nam")] == [
            ("conventions:naming:0", 1),
            ("conventions:naming:1", 3),
        ]

    def test_raw_and_stemmed_forms_share_position(self, index):
        raw = index.postings_for("naming")
        stemmed = index.postings_for("nam")

        assert [(p.doc_id, p.position) for p in raw] == [(p.doc_id, p.position) for p in stemmed]

    def test_document_frequency(self, index):
        assert index.document_frequency("microflow") == 2
        assert index.document_frequency("naming") == 2
        assert index.document_frequency("missing") == 0

    def test_candidates_follow_corpus_order(self, index):
        matches = index.candidates(["performance", "microflow"])

        assert [m.doc_id for m in matches] == ["conventions:naming:0", "conventions:naming:2"]
        assert matches[1].matched_terms == ("performance", "microflow")
        # "vs" is shorter than three characters and leaves no gap
        assert matches[1].positions == (1, 2)

    def test_stats(self, index):
        stats = index.stats()

        assert stats.indexed_documents == 3
        assert stats.indexed_terms == len(index.vocabulary)
        assert stats.skipped_documents == 0

    def test_posting_serialization(self, index):
        posting = index.postings_for("microflow")[0]

        assert posting.to_dict() == {"term": "microflow", "doc_id": "conventions:naming:0", "position": 0}


@pytest.mark.unit
class TestIndexStatistics:
    def test_average_terms_per_document(self):
        assert IndexStatistics(indexed_documents=4, indexed_terms=10, skipped_documents=0).average_terms_per_document == 2.5
        assert IndexStatistics(indexed_documents=0, indexed_terms=0, skipped_documents=2).average_terms_per_document == 0.0


@pytest.mark.unit
class TestCorpusItem:
    def test_default_id_uses_items_for_flat_lists(self):
        item = CorpusItem(source_file="kb", category=None, entry={"title": "t"}, ordinal=2)

        assert item.default_id() == "kb:items:2"

    def test_document_fields_are_read_only(self):
        document = CorpusItem(source_file="kb", category="c", entry={"title": "Read only"}, ordinal=0).to_document()

        with pytest.raises(TypeError):
            document.raw_fields["title"] = "changed"  # type: ignore[index]
