"""Trace identifiers carried across threads and tasks via a ContextVar."""

from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4


# Copied into worker threads by asyncio.to_thread, so the keyword path logs
# with the same trace id as the search that spawned it.
trace_context: ContextVar[dict | None] = ContextVar("knowledge_trace_context", default=None)


def generate_trace_id() -> str:
    return uuid4().hex


def generate_span_id() -> str:
    return uuid4().hex[:16]


def get_trace_context() -> dict:
    """Return the current trace context, creating one on first use."""
    ctx = trace_context.get()
    if ctx is None or not ctx.get("trace_id"):
        ctx = {"trace_id": generate_trace_id(), "span_id": generate_span_id()}
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> None:
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def bind_span(trace_id: int, span_id: int) -> None:
    """Point the logging context at an OpenTelemetry span."""
    ctx = trace_context.get() or {}
    trace_context.set({**ctx, "trace_id": format(trace_id, "032x"), "span_id": format(span_id, "016x")})
