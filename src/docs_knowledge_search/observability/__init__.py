"""Logging, metrics and tracing for the search core."""

from docs_knowledge_search.observability.context import get_trace_context, set_trace_context, trace_context
from docs_knowledge_search.observability.logging import JsonFormatter, configure_logging
from docs_knowledge_search.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEX_SKIPPED,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    VECTOR_FAILURES,
    MetricBridge,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from docs_knowledge_search.observability.setup import configure_observability
from docs_knowledge_search.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "INDEX_DOC_COUNT",
    "INDEX_SKIPPED",
    "SEARCH_LATENCY",
    "SEARCH_REQUESTS",
    "VECTOR_FAILURES",
    "JsonFormatter",
    "MetricBridge",
    "configure_logging",
    "configure_observability",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
