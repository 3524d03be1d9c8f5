"""Prometheus metrics for the matching engine."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


SEARCH_LATENCY = Histogram(
    "ascii_match_search_latency_seconds",
    "Query evaluation plus selection latency",
    ["mode"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)

SEARCH_REQUESTS = Counter(
    "ascii_match_searches_total",
    "Total searches by outcome",
    ["outcome"],
)

INDEX_DOC_COUNT = Gauge(
    "ascii_match_index_document_count",
    "Documents in the inverted index",
)

INDEX_BUILD_SECONDS = Gauge(
    "ascii_match_index_build_seconds",
    "Wall time of the last index build",
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        metric = histogram.labels(**labels) if labels else histogram
        metric.observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get content type for metrics endpoint."""
    return CONTENT_TYPE_LATEST
