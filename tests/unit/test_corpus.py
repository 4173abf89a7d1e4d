"""Unit tests for knowledge base loading."""

import orjson
import pytest

from docs_knowledge_search.corpus import iter_corpus_items, load_knowledge_directory
from docs_knowledge_search.exceptions import CorpusError


@pytest.mark.unit
class TestIterCorpusItems:
    def test_yields_categories_then_items(self):
        knowledge_base = {
            "kb": {
                "categories": {"loops": [{"title": "a"}, {"title": "b"}]},
                "items": [{"title": "c"}],
            },
            "manifest": {"version": 1},
            "broken": ["not", "a", "file"],
        }

        items = list(iter_corpus_items(knowledge_base))

        assert [(i.source_file, i.category, i.ordinal) for i in items] == [
            ("kb", "loops", 0),
            ("kb", "loops", 1),
            ("kb", None, 0),
        ]

    def test_non_list_categories_are_ignored(self):
        knowledge_base = {"kb": {"categories": {"bad": {"title": "x"}, "good": [{"title": "y"}]}}}

        assert [i.category for i in iter_corpus_items(knowledge_base)] == ["good"]

    def test_entries_are_passed_through_unvalidated(self):
        items = list(iter_corpus_items({"kb": {"items": ["plain string", 7]}}))

        assert [i.entry for i in items] == ["plain string", 7]


@pytest.mark.unit
class TestLoadKnowledgeDirectory:
    def test_loads_json_files_by_stem(self, tmp_path):
        (tmp_path / "patterns.json").write_bytes(orjson.dumps({"items": [{"title": "p"}]}))
        (tmp_path / "best-practices.json").write_bytes(orjson.dumps({"categories": {"x": []}}))
        (tmp_path / "notes.txt").write_text("ignored")

        knowledge_base = load_knowledge_directory(tmp_path)

        assert list(knowledge_base) == ["best-practices", "patterns"]
        assert knowledge_base["patterns"]["items"][0]["title"] == "p"

    def test_invalid_json_raises(self, tmp_path):
        (tmp_path / "broken.json").write_text("{not json")

        with pytest.raises(CorpusError, match="broken.json"):
            load_knowledge_directory(tmp_path)

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(CorpusError, match="does not exist"):
            load_knowledge_directory(tmp_path / "missing")
