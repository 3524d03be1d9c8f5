"""Matching engine: one query string in, at most one document out.

Hides the index, query tree and selector behind ``search()``. The engine is
immutable after construction; each call creates its own selector, so
concurrent searches share nothing mutable.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging
import random
import time

from ascii_match.config import Settings
from ascii_match.errors import QueryConfigError
from ascii_match.observability.metrics import (
    INDEX_BUILD_SECONDS,
    INDEX_DOC_COUNT,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    track_latency,
)
from ascii_match.observability.tracing import create_span
from ascii_match.search.index import InvertedIndex
from ascii_match.search.models import IndexableDocument
from ascii_match.search.query import (
    DEFAULT_TIE_BREAKER,
    DisMax,
    MatchAll,
    Query,
    build_query,
    evaluate,
    iter_matches,
)
from ascii_match.search.schema import Schema, create_default_schema
from ascii_match.search.selector import SelectionMode, create_selector


logger = logging.getLogger(__name__)


class MatchEngine:
    """Free-text matching over an immutable inverted index."""

    def __init__(
        self,
        index: InvertedIndex,
        *,
        tie_breaker: float = DEFAULT_TIE_BREAKER,
        selection_mode: SelectionMode | str = SelectionMode.RANDOM,
        rng: random.Random | None = None,
    ) -> None:
        if not 0.0 <= tie_breaker <= 1.0:
            msg = f"tie_breaker must be within [0, 1], got {tie_breaker}"
            raise QueryConfigError(msg)
        self.index = index
        self.tie_breaker = tie_breaker
        self.selection_mode = SelectionMode(selection_mode)
        self._rng = rng

    @classmethod
    def from_documents(
        cls,
        documents: Iterable[IndexableDocument],
        settings: Settings | None = None,
        *,
        schema: Schema | None = None,
        rng: random.Random | None = None,
    ) -> MatchEngine:
        settings = settings or Settings()
        schema = schema or create_default_schema(settings.shingle_width)
        started = time.perf_counter()
        with create_span("index.build", attributes={"index.workers": settings.index_workers}):
            index = InvertedIndex.build(documents, schema, max_workers=settings.index_workers)
        INDEX_BUILD_SECONDS.set(time.perf_counter() - started)
        INDEX_DOC_COUNT.set(index.doc_count)
        return cls(
            index,
            tie_breaker=settings.tie_breaker,
            selection_mode=settings.selection_mode,
            rng=rng,
        )

    @property
    def doc_count(self) -> int:
        return self.index.doc_count

    def build_query(self, query_string: str) -> DisMax:
        return build_query(self.index, query_string, tie_breaker=self.tie_breaker)

    def search(self, query_string: str) -> IndexableDocument | None:
        """Return one document matching ``query_string``, or None."""
        return self.select(self.build_query(query_string), query_string=query_string)

    def random_document(self) -> IndexableDocument | None:
        """Return any document; None only for an empty corpus."""
        return self.select(MatchAll())

    def select(self, query: Query, *, query_string: str = "") -> IndexableDocument | None:
        mode = self.selection_mode.value
        with create_span("search.select", attributes={"search.mode": mode}) as span:
            with track_latency(SEARCH_LATENCY, mode=mode):
                selector = create_selector(self.selection_mode, self._rng)
                evaluate(self.index, query, selector.offer)
                selected = selector.selected
            span.set_attribute("search.candidates", selector.seen)

        outcome = "match" if selected is not None else "no_match"
        SEARCH_REQUESTS.labels(outcome=outcome).inc()
        logger.debug(
            "query %r: %d candidates, selected %s",
            query_string,
            selector.seen,
            selected.doc_id if selected is not None else None,
        )
        return selected

    def candidates(self, query_string: str) -> list[int]:
        """Document ids matching ``query_string`` in ascending order."""
        return [match.doc_id for match in iter_matches(self.index, self.build_query(query_string))]
