"""Unit tests for Reciprocal Rank Fusion and deduplication."""

import pytest

from docs_knowledge_search.domain.search import FusedResult
from docs_knowledge_search.search.fusion import (
    FusionWeights,
    deduplicate,
    fuse,
    normalize_title,
    reciprocal_rank_fusion,
    rrf_contribution,
)
from docs_knowledge_search.search.models import Candidate, VectorCandidate


def kw(title, score=0.5, **kwargs):
    return Candidate(title=title, score=score, source_type="keyword", **kwargs)


def vec(title, score=0.5, **kwargs):
    return VectorCandidate(title=title, score=score, **kwargs)


def fused(title, score, sources=("keyword",)):
    return FusedResult(
        title=title,
        fused_score=score,
        original_score=score,
        sources=sources,
        match_type="both" if len(sources) > 1 else sources[0],
    )


@pytest.mark.unit
class TestReciprocalRankFusion:
    def test_rrf_contribution(self):
        assert rrf_contribution(0.4, 0) == pytest.approx(0.4 / 61)
        assert rrf_contribution(0.6, 2, k=10) == pytest.approx(0.6 / 13)

    def test_empty_vector_list_keeps_keyword_order(self):
        results = fuse([kw("A", 0.9), kw("B", 0.8), kw("C", 0.7)], [])

        assert [r.title for r in results] == ["A", "B", "C"]
        assert all(r.match_type == "keyword" and r.sources == ("keyword",) for r in results)
        assert [r.fused_score for r in results] == [0.9, 0.8, 0.7]
        assert results[0].original_score == 0.9
        assert results[0].keyword_score == 0.9

    def test_empty_vector_list_ignores_freshness(self):
        old = kw("Old doc", 0.9, entry={"title": "Old doc"})
        new = kw("New doc", 0.5, entry={"title": "New doc", "version": "Studio Pro 11"})

        results = fuse([old, new], [])

        assert [r.title for r in results] == ["Old doc", "New doc"]
        assert [r.fused_score for r in results] == [0.9, 0.5]
        assert all(r.freshness_boost == 0.0 for r in results)

    def test_empty_keyword_list_returns_vector_ranking(self):
        results = fuse([], [vec("First", 0.4), vec("Second", 0.8), vec("Third", 1.3)])

        assert [r.title for r in results] == ["First", "Second", "Third"]
        assert [r.fused_score for r in results] == [0.4, 0.8, 1.0]
        assert all(r.match_type == "vector" for r in results)

    def test_single_list_still_collapses_near_duplicates(self):
        results = fuse([kw("Page Layout", 0.9), kw("Other", 0.7), kw("page-layout", 0.6)], [])

        assert [r.title for r in results] == ["Page Layout", "Other"]

    def test_both_lists_empty(self):
        assert fuse([], []) == []

    def test_candidates_in_both_lists_sum_contributions(self):
        results = fuse([kw("A"), kw("B")], [vec("B"), vec("C")])

        assert [r.title for r in results] == ["B", "C", "A"]
        assert results[0].match_type == "both"
        assert results[0].sources == ("keyword", "vector")
        assert results[0].original_score == pytest.approx(0.4 / 62 + 0.6 / 61)

    def test_each_list_counts_once_per_identity(self):
        entries = reciprocal_rank_fusion([kw("A", 0.9), kw("A", 0.5)], [vec("A"), vec("A")])

        assert list(entries) == ["A"]
        assert entries["A"].rrf_score == pytest.approx(0.4 / 61 + 0.6 / 61)
        assert entries["A"].keyword_score == 0.9

    def test_untitled_vector_hits_get_rank_identity(self):
        entries = reciprocal_rank_fusion([], [vec(""), vec("")])

        assert list(entries) == ["vec-0", "vec-1"]

    def test_vector_metadata_is_carried(self):
        results = fuse([], [vec("V", category="guides", preview="snippet", source_file="docs")])

        assert results[0].category == "guides"
        assert results[0].preview == "snippet"
        assert results[0].source_file == "docs"
        assert results[0].vector_score == 0.5

    def test_custom_weights(self):
        results = fuse([kw("A")], [vec("B")], FusionWeights(keyword=0.9, vector=0.1))

        assert [r.title for r in results] == ["A", "B"]


@pytest.mark.unit
class TestFreshnessInFusion:
    def test_boost_can_reorder_results(self):
        old = kw("Old guide", entry={"title": "Old guide"})
        new = kw("New guide", entry={"title": "New guide", "mendix_version": "11.2.0"})

        results = fuse([old, new], [vec("Other")])

        assert [r.title for r in results] == ["Other", "New guide", "Old guide"]
        assert results[1].freshness_boost == 0.15
        assert results[1].fused_score == pytest.approx(0.4 / 62 * 1.15)
        assert results[1].original_score == pytest.approx(0.4 / 62)

    def test_signals_can_be_disabled(self):
        new = kw("New guide", entry={"title": "New guide", "mendix_version": "11.2.0"})

        result = next(r for r in fuse([new], [vec("Other")], signals=()) if r.title == "New guide")

        assert result.freshness_boost == 0.0
        assert result.fused_score == result.original_score


@pytest.mark.unit
class TestDeduplication:
    def test_normalize_title(self):
        assert normalize_title("Microflow Naming!") == "microflownaming"
        assert normalize_title("microflow-naming") == "microflownaming"
        assert normalize_title(None) == ""

    def test_near_duplicate_titles_collapse_to_best(self):
        results = fuse([kw("Microflow Naming", 0.9), kw("microflow-naming", 0.8)], [])

        assert [r.title for r in results] == ["Microflow Naming"]

    def test_later_better_result_replaces_earlier_one(self):
        weaker = fused("Microflow Naming", 0.01)
        stronger = fused("microflow-naming", 0.02)

        assert deduplicate([weaker, stronger]) == [stronger]

    def test_more_sources_wins_on_equal_score(self):
        single = fused("Page Layout", 0.02)
        both = fused("page layout", 0.02, sources=("keyword", "vector"))

        assert deduplicate([single, both]) == [both]
        assert deduplicate([both, single]) == [both]

    def test_non_latin_titles_dedupe_by_lowercase(self):
        first = fused("計算", 0.02)
        second = fused("計算", 0.01)
        other = fused("設定", 0.015)

        assert deduplicate([first, second, other]) == [first, other]

    def test_output_is_sorted_descending(self):
        results = deduplicate([fused("a", 0.1), fused("b", 0.3), fused("c", 0.2)])

        assert [r.title for r in results] == ["b", "c", "a"]
