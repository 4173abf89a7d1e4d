"""Unit tests for Settings."""

from pydantic import ValidationError
import pytest

from docs_knowledge_search.config import Settings


@pytest.mark.unit
class TestSettingsDefaults:
    def test_defaults(self, settings):
        assert settings.search_max_results == 10
        assert settings.search_min_score == 0.3
        assert settings.search_fuzzy_enabled is True
        assert settings.search_expand_terms is True
        assert settings.keyword_weight == 0.4
        assert settings.vector_weight == 0.6
        assert settings.rrf_k == 60
        assert settings.vector_timeout_seconds == 5.0
        assert settings.analytics_history_size == 1000
        assert settings.knowledge_gap_capacity == 100

    def test_optional_collaborators_are_off_by_default(self, settings):
        assert not settings.has_vector_oracle()
        assert not settings.has_analytics_sink()


@pytest.mark.unit
class TestSettingsFromEnvironment:
    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SEARCH_MAX_RESULTS", "5")
        monkeypatch.setenv("vector_oracle_url", "http://vectors.internal/query")
        monkeypatch.setenv("SEARCH_FUZZY_ENABLED", "false")

        settings = Settings(_env_file=None)

        assert settings.search_max_results == 5
        assert settings.search_fuzzy_enabled is False
        assert settings.has_vector_oracle()

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("ANALYTICS_PATH=/tmp/analytics.json\nRRF_K=30\n")

        settings = Settings(_env_file=env_file)

        assert settings.rrf_k == 30
        assert settings.has_analytics_sink()

    def test_unknown_variables_are_ignored(self, monkeypatch):
        monkeypatch.setenv("SOMETHING_ELSE", "1")

        assert Settings(_env_file=None).rrf_k == 60


@pytest.mark.unit
class TestSettingsValidation:
    def test_rejects_all_zero_weights(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Settings(_env_file=None, keyword_weight=0, vector_weight=0)

    def test_single_zero_weight_is_allowed(self):
        assert Settings(_env_file=None, vector_weight=0).keyword_weight == 0.4

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("search_max_results", 0),
            ("search_max_results", 101),
            ("search_min_score", 1.5),
            ("vector_timeout_seconds", 0),
            ("rrf_k", 0),
        ],
    )
    def test_out_of_range_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})
