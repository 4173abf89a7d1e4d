"""OpenTelemetry spans for indexing and search."""

from __future__ import annotations

from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import SpanKind, Status, StatusCode

from docs_knowledge_search.observability.context import bind_span


if TYPE_CHECKING:
    from collections.abc import Generator

    from opentelemetry.trace import Span, Tracer

logger = logging.getLogger(__name__)

SERVICE_NAME = "docs-knowledge-search"

_tracer_holder: dict[str, Tracer | None] = {"tracer": None}


def init_tracing(
    service_name: str = SERVICE_NAME,
    resource_attributes: dict[str, str] | None = None,
) -> TracerProvider:
    """Install an SDK tracer provider. Exporters are attached by the host process."""
    attributes = {"service.name": service_name, **(resource_attributes or {})}
    provider = TracerProvider(resource=Resource.create(attributes))
    trace.set_tracer_provider(provider)
    _tracer_holder["tracer"] = trace.get_tracer(__name__)
    logger.debug("Tracing initialized for service: %s", service_name)
    return provider


def get_tracer() -> Tracer:
    if _tracer_holder["tracer"] is None:
        # Use whatever provider the host configured; the API default is a no-op.
        _tracer_holder["tracer"] = trace.get_tracer(__name__)
    return _tracer_holder["tracer"]  # type: ignore[return-value]


@contextmanager
def create_span(
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    attributes: dict[str, Any] | None = None,
) -> Generator[Span, None, None]:
    """Open a span, bind its ids to the logging context and record failures."""
    with get_tracer().start_as_current_span(name, kind=kind, record_exception=False) as span:
        for key, value in (attributes or {}).items():
            span.set_attribute(key, value)

        ctx = span.get_span_context()
        if ctx.is_valid:
            bind_span(ctx.trace_id, ctx.span_id)

        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            span.record_exception(exc)
            raise
