"""Centralized configuration for docs-knowledge-search using Pydantic Settings."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every knob of the retrieval core lives here so deployments can tune
    ranking and analytics without code changes. Values are validated once
    at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Search defaults
    search_max_results: int = Field(default=10, ge=1, le=100, description="Default number of results per search")
    search_min_score: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Minimum keyword relevance score before a candidate takes part in fusion",
    )
    search_fuzzy_enabled: bool = Field(default=True, description="Enable typo-tolerant matching by default")
    search_expand_terms: bool = Field(
        default=True, description="Expand domain abbreviations into full phrases before keyword search"
    )

    # Fusion
    keyword_weight: float = Field(default=0.4, ge=0.0, le=1.0, description="RRF weight of the keyword list")
    vector_weight: float = Field(default=0.6, ge=0.0, le=1.0, description="RRF weight of the vector list")
    rrf_k: int = Field(default=60, ge=1, description="Reciprocal Rank Fusion damping constant")

    # Vector oracle
    vector_timeout_seconds: float = Field(default=5.0, gt=0, description="Timeout for a single vector query")
    vector_oracle_url: str = Field(default="", description="HTTP endpoint of the vector similarity service")

    # Analytics
    analytics_history_size: int = Field(default=1000, ge=1, description="Query records kept in the ring buffer")
    knowledge_gap_capacity: int = Field(default=100, ge=1, description="Distinct zero-result queries retained")
    analytics_path: str = Field(default="", description="File where analytics snapshots are published")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @model_validator(mode="after")
    def _check_weights(self) -> "Settings":
        if self.keyword_weight == 0 and self.vector_weight == 0:
            raise ValueError(
                "At least one of KEYWORD_WEIGHT or VECTOR_WEIGHT must be positive, "
                "otherwise every fused score is zero."
            )
        return self

    def has_vector_oracle(self) -> bool:
        """Check if a remote vector oracle is configured."""
        return bool(self.vector_oracle_url.strip())

    def has_analytics_sink(self) -> bool:
        """Check if analytics snapshots should be published to disk."""
        return bool(self.analytics_path.strip())
