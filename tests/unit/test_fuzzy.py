"""Unit tests for fuzzy matching / typo correction."""

import pytest

from docs_knowledge_search.search.fuzzy import (
    FuzzyMatcher,
    find_fuzzy_matches,
    get_max_edit_distance,
    levenshtein_distance,
)


@pytest.mark.unit
class TestLevenshteinDistance:
    def test_identical_strings(self):
        assert levenshtein_distance("microflow", "microflow") == 0

    def test_empty_strings(self):
        assert levenshtein_distance("", "") == 0
        assert levenshtein_distance("abc", "") == 3
        assert levenshtein_distance("", "abc") == 3

    def test_single_edits(self):
        assert levenshtein_distance("page", "pages") == 1
        assert levenshtein_distance("pages", "page") == 1
        assert levenshtein_distance("entity", "entety") == 1

    def test_transposition_costs_two(self):
        assert levenshtein_distance("micorflow", "microflow") == 2

    def test_multiple_edits(self):
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_early_abandonment_caps_result(self):
        assert levenshtein_distance("association", "xyz", max_distance=2) == 3
        assert levenshtein_distance("nanoflow", "microflow", max_distance=1) == 2


@pytest.mark.unit
class TestGetMaxEditDistance:
    def test_short_terms_are_not_fuzzed(self):
        assert get_max_edit_distance(2) == 0
        assert get_max_edit_distance(3) == 0

    def test_medium_terms_allow_one_edit(self):
        assert get_max_edit_distance(4) == 1
        assert get_max_edit_distance(6) == 1

    def test_long_terms_allow_two_edits(self):
        assert get_max_edit_distance(7) == 2
        assert get_max_edit_distance(15) == 2


@pytest.mark.unit
class TestFindFuzzyMatches:
    def test_finds_transposed_term(self):
        assert find_fuzzy_matches("micorflow", ["microflow", "nanoflow", "workflow"]) == [("microflow", 2)]

    def test_exact_matches_are_excluded(self):
        assert find_fuzzy_matches("page", ["page", "pages"]) == [("pages", 1)]

    def test_results_sorted_by_distance_then_term(self):
        matches = find_fuzzy_matches("entitys", ["entity", "entities", "entitys2"])

        assert matches == [("entity", 1), ("entitys2", 1), ("entities", 2)]

    def test_length_difference_prunes_candidates(self):
        assert find_fuzzy_matches("page", ["pageination"]) == []

    def test_single_edit_on_long_term_requires_first_character(self):
        # "xntity" is one substitution away but starts differently
        assert find_fuzzy_matches("xntity", ["entity"]) == []
        # five characters is short enough to skip the first-character check
        assert find_fuzzy_matches("xlass", ["class"]) == [("class", 1)]

    def test_short_query_terms_are_ignored(self):
        assert find_fuzzy_matches("abc", ["abd"]) == []

    def test_explicit_max_distance(self):
        assert find_fuzzy_matches("micorflow", ["microflow"], max_distance=1) == []


@pytest.mark.unit
class TestFuzzyMatcher:
    def test_expand_only_out_of_vocabulary_terms(self):
        matcher = FuzzyMatcher(["microflow", "page"])

        expanded = matcher.expand(["microflow", "micorflow", "pge", "zzzzzz"])

        assert expanded == {"micorflow": ["microflow"]}

    def test_fuzzy_matches_returns_terms_only(self):
        assert FuzzyMatcher(["pages", "page", "widget"]).fuzzy_matches("pagex") == ["page", "pages"]
