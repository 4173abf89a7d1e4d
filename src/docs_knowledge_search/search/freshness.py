"""Freshness signals used to nudge fused scores toward current content.

Freshness is a best-effort heuristic, not a relevance guarantee: a document
that mentions several product versions is boosted by the newest one it
mentions. Signals are pluggable; the first signal that returns a positive
boost decides.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
import re
from typing import Any, Protocol

from docs_knowledge_search.search.extraction import extract_text


MAX_FRESHNESS_BOOST = 0.15


class FreshnessSignal(Protocol):
    """Return a boost fraction (0.1 means +10%) for an entry."""

    def __call__(self, entry: Mapping[str, Any]) -> float:  # pragma: no cover - interface definition
        ...


@dataclass(frozen=True)
class VersionTier:
    pattern: re.Pattern[str]
    boost: float


DEFAULT_VERSION_TIERS: tuple[VersionTier, ...] = (
    VersionTier(re.compile(r"studio\s*pro\s*11|mendix\s*11|\b11\.\d+\.\d+", re.IGNORECASE), 0.15),
    VersionTier(re.compile(r"studio\s*pro\s*10|mendix\s*10|\b10\.\d+\.\d+", re.IGNORECASE), 0.10),
    VersionTier(re.compile(r"studio\s*pro\s*9|mendix\s*9|\b9\.\d+\.\d+", re.IGNORECASE), 0.05),
)


def _version_text(entry: Mapping[str, Any]) -> str:
    # Depth-bounded, so cyclic or non-JSON entries are probed like any other.
    return extract_text(entry)


class VersionMarkerSignal:
    """Boost entries that mention recent product versions.

    Tiers are checked newest first and the first hit wins.
    """

    def __init__(self, tiers: Sequence[VersionTier] = DEFAULT_VERSION_TIERS) -> None:
        self.tiers = tuple(tiers)

    def __call__(self, entry: Mapping[str, Any]) -> float:
        text = _version_text(entry)
        for tier in self.tiers:
            if tier.pattern.search(text):
                return tier.boost
        return 0.0


@dataclass(frozen=True)
class AgeThreshold:
    max_age_days: float
    boost: float


DEFAULT_AGE_THRESHOLDS: tuple[AgeThreshold, ...] = (
    AgeThreshold(max_age_days=30, boost=0.10),
    AgeThreshold(max_age_days=90, boost=0.05),
)


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        # Epoch values from JavaScript producers are in milliseconds.
        seconds = value / 1000 if value > 10_000_000_000 else value
        parsed = datetime.fromtimestamp(seconds, tz=timezone.utc)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class RecencySignal:
    """Boost entries by the age of their ``added_at``/``timestamp``/``date`` field."""

    timestamp_fields: tuple[str, ...] = ("added_at", "timestamp", "date")

    def __init__(
        self,
        thresholds: Sequence[AgeThreshold] = DEFAULT_AGE_THRESHOLDS,
        *,
        now: datetime | None = None,
    ) -> None:
        self.thresholds = tuple(sorted(thresholds, key=lambda t: t.max_age_days))
        self._now = now

    def __call__(self, entry: Mapping[str, Any]) -> float:
        timestamp = None
        for name in self.timestamp_fields:
            timestamp = _parse_timestamp(entry.get(name))
            if timestamp is not None:
                break
        if timestamp is None:
            return 0.0

        now = self._now or datetime.now(timezone.utc)
        age_days = (now - timestamp).total_seconds() / 86400
        for threshold in self.thresholds:
            if age_days < threshold.max_age_days:
                return threshold.boost
        return 0.0


DEFAULT_SIGNALS: tuple[FreshnessSignal, ...] = (VersionMarkerSignal(), RecencySignal())


def calculate_freshness_boost(
    entry: Mapping[str, Any] | None,
    signals: Sequence[FreshnessSignal] = DEFAULT_SIGNALS,
) -> float:
    """Return the first positive boost among ``signals``, capped at +15%."""
    if not entry:
        return 0.0
    for signal in signals:
        boost = signal(entry)
        if boost > 0:
            return min(boost, MAX_FRESHNESS_BOOST)
    return 0.0
