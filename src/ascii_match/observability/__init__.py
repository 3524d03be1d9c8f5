"""Observability module: structured logging, tracing and Prometheus metrics."""

from ascii_match.observability.context import get_trace_context, set_trace_context, trace_context
from ascii_match.observability.logging import JsonFormatter, configure_logging
from ascii_match.observability.metrics import (
    INDEX_BUILD_SECONDS,
    INDEX_DOC_COUNT,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from ascii_match.observability.tracing import TraceContextMiddleware, create_span, get_tracer, init_tracing


__all__ = [
    "INDEX_BUILD_SECONDS",
    "INDEX_DOC_COUNT",
    "SEARCH_LATENCY",
    "SEARCH_REQUESTS",
    "JsonFormatter",
    "TraceContextMiddleware",
    "configure_logging",
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
