"""Unit tests for text and title extraction from knowledge entries."""

import pytest

from docs_knowledge_search.search.extraction import (
    FieldProbe,
    FirstShortStringProbe,
    extract_text,
    extract_title,
    important_field_values,
)


@pytest.mark.unit
class TestExtractText:
    def test_flattens_nested_strings_in_field_order(self):
        entry = {"title": "Loop", "details": {"steps": ["retrieve", "iterate"]}, "count": 3}

        assert extract_text(entry) == "Loop retrieve iterate"

    def test_depth_limit_stops_recursion(self):
        deep: dict = {"text": "bottom"}
        for _ in range(8):
            deep = {"child": deep}

        assert extract_text({"title": "top", "nested": deep}) == "top"

    def test_non_string_leaves_are_ignored(self):
        assert extract_text({"flag": True, "values": [1, 2.5, None]}) == ""


@pytest.mark.unit
class TestFieldProbes:
    def test_field_probe_follows_nested_path(self):
        probe = FieldProbe(("pattern", "name"))

        assert probe({"pattern": {"name": "Facade"}}) == "Facade"
        assert probe({"pattern": "Facade"}) is None
        assert probe({"pattern": {"name": ""}}) is None

    def test_first_short_string_probe_skips_out_of_range_values(self):
        probe = FirstShortStringProbe()

        assert probe({"id": "x1", "summary": "Reasonable title"}) == "Reasonable title"
        assert probe({"body": "y" * 150, "meta": {"label": "Nested label"}}) == "Nested label"
        assert probe({"id": "x1"}) is None


@pytest.mark.unit
class TestExtractTitle:
    def test_title_field_has_priority(self):
        assert extract_title({"name": "By name", "title": "By title"}) == "By title"

    def test_nested_pattern_name(self):
        assert extract_title({"pattern": {"name": "Create an entity"}}) == "Create an entity"

    def test_metadata_title_before_fallback(self):
        entry = {"body": "Some longer body text", "_metadata": {"title": "Meta title"}}

        assert extract_title(entry) == "Meta title"

    def test_falls_back_to_first_short_string(self):
        assert extract_title({"foo": "ab", "bar": "Long enough"}) == "Long enough"

    def test_plain_string_entry_is_its_own_title(self):
        assert extract_title("Use sub-microflows") == "Use sub-microflows"

    def test_unusable_entries(self):
        assert extract_title(None) is None
        assert extract_title(42) is None
        assert extract_title({"n": 1}) is None

    def test_custom_probe_order(self):
        probes = (FieldProbe(("name",)), FieldProbe(("title",)))

        assert extract_title({"name": "By name", "title": "By title"}, probes) == "By name"


@pytest.mark.unit
class TestImportantFieldValues:
    def test_collects_title_like_strings(self):
        entry = {"title": "Y", "name": "X", "body": "z", "topic": 3}

        assert important_field_values(entry) == ["X", "Y"]

    def test_non_mapping_has_none(self):
        assert important_field_values(["title"]) == []
