"""Search and indexing metrics exposed to Prometheus and OpenTelemetry.

Each metric is a Prometheus collector paired with a lazily created OTel
instrument, so a process scraping ``/metrics`` and one exporting through an
OTel meter provider see the same numbers.
"""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics as otel_metrics
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


_meter_holder: dict[str, Any] = {"meter": None}


def _get_meter():
    meter = _meter_holder["meter"]
    if meter is None:
        meter = _meter_holder["meter"] = otel_metrics.get_meter(__name__)
    return meter


class _BoundMetric:
    def __init__(self, bridge: MetricBridge, labels: dict[str, str]) -> None:
        self._bridge = bridge
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._bridge.inc(self._labels, amount)

    def observe(self, value: float) -> None:
        self._bridge.observe(self._labels, value)

    def set(self, value: float) -> None:
        self._bridge.set(self._labels, value)


class MetricBridge:
    """Mirror writes to a Prometheus collector onto an OTel instrument."""

    _FACTORIES = {
        "counter": "create_counter",
        "histogram": "create_histogram",
        "gauge": "create_up_down_counter",
    }

    def __init__(
        self,
        prom_metric: Counter | Histogram | Gauge,
        *,
        name: str,
        description: str,
        kind: str,
    ) -> None:
        if kind not in self._FACTORIES:
            raise ValueError(f"Unknown metric kind: {kind}")
        self._prom_metric = prom_metric
        self._name = name
        self._description = description
        self._kind = kind
        self._instrument = None
        self._gauge_values: dict[tuple[tuple[str, str], ...], float] = {}

    @property
    def prometheus(self) -> Counter | Histogram | Gauge:
        return self._prom_metric

    def labels(self, **labels: str) -> _BoundMetric:
        return _BoundMetric(self, labels)

    def _otel(self):
        if self._instrument is None:
            factory = getattr(_get_meter(), self._FACTORIES[self._kind])
            self._instrument = factory(self._name, description=self._description)
        return self._instrument

    def _prom(self, labels: dict[str, str]):
        return self._prom_metric.labels(**labels) if labels else self._prom_metric

    def inc(self, labels: dict[str, str] | None = None, amount: float = 1.0) -> None:
        labels = labels or {}
        self._prom(labels).inc(amount)
        self._otel().add(amount, labels)

    def observe(self, labels: dict[str, str] | None, value: float) -> None:
        labels = labels or {}
        self._prom(labels).observe(value)
        self._otel().record(value, labels)

    def set(self, labels: dict[str, str] | None, value: float) -> None:
        labels = labels or {}
        self._prom(labels).set(value)
        # OTel has no synchronous gauge set; emit the delta on an up/down counter.
        key = tuple(sorted(labels.items()))
        delta = value - self._gauge_values.get(key, 0.0)
        if delta:
            self._otel().add(delta, labels)
        self._gauge_values[key] = value


SEARCH_LATENCY = MetricBridge(
    Histogram(
        "search_latency_seconds",
        "Hybrid search latency",
        ["mode"],
        buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0),
    ),
    name="search_latency_seconds",
    description="Hybrid search latency",
    kind="histogram",
)

SEARCH_REQUESTS = MetricBridge(
    Counter("search_requests_total", "Search requests by retrieval mode", ["mode"]),
    name="search_requests_total",
    description="Search requests by retrieval mode",
    kind="counter",
)

VECTOR_FAILURES = MetricBridge(
    Counter("vector_failures_total", "Vector oracle failures that degraded a search", ["reason"]),
    name="vector_failures_total",
    description="Vector oracle failures that degraded a search",
    kind="counter",
)

INDEX_DOC_COUNT = MetricBridge(
    Gauge("index_document_count", "Documents in the served index"),
    name="index_document_count",
    description="Documents in the served index",
    kind="gauge",
)

INDEX_SKIPPED = MetricBridge(
    Counter("index_skipped_documents", "Corpus entries skipped during indexing"),
    name="index_skipped_documents_total",
    description="Corpus entries skipped during indexing",
    kind="counter",
)


@contextmanager
def track_latency(histogram: MetricBridge, **labels: str) -> Generator[None, None, None]:
    """Observe the wall time of the enclosed block."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.observe(labels, time.perf_counter() - start)


def get_metrics() -> bytes:
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
