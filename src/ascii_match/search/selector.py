"""Pick exactly one document from a stream of matches.

Two named modes exist and are never mixed:

- ``random`` (default): reservoir sampling of size 1. Each candidate draws a
  fresh 63-bit random key and the largest key wins, which makes every
  candidate equally likely regardless of stream length or arrival order. The
  relevance score only decides *whether* a document is a candidate.
- ``top_score``: keep the highest relevance score; ties go to the earliest
  (lowest doc id) candidate.

Selectors hold O(1) state and must not be shared between concurrent queries.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
import random
from typing import Protocol

from ascii_match.search.models import IndexableDocument, MatchResult


KEY_BITS = 63


class SelectionMode(str, Enum):
    """How the final document is chosen among the matches."""

    RANDOM = "random"
    TOP_SCORE = "top_score"


class Selector(Protocol):
    """Protocol implemented by single-result selectors."""

    def offer(self, match: MatchResult) -> None:  # pragma: no cover - interface definition
        ...

    @property
    def selected(self) -> IndexableDocument | None:  # pragma: no cover - interface definition
        ...


class ReservoirSelector:
    """Uniform random choice over an unbounded stream in a single pass."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._best: IndexableDocument | None = None
        self._best_key = -1
        self.seen = 0

    def offer(self, match: MatchResult) -> None:
        self.seen += 1
        key = self._rng.getrandbits(KEY_BITS)
        if key > self._best_key:
            self._best = match.document
            self._best_key = key

    # Makes the selector usable directly as an ``evaluate`` consumer.
    __call__ = offer

    @property
    def selected(self) -> IndexableDocument | None:
        return self._best


class TopScoreSelector:
    """Deterministic top-1 by relevance score."""

    def __init__(self) -> None:
        self._best: IndexableDocument | None = None
        self._best_score = float("-inf")
        self.seen = 0

    def offer(self, match: MatchResult) -> None:
        self.seen += 1
        if self._best is None or match.score > self._best_score:
            self._best = match.document
            self._best_score = match.score

    __call__ = offer

    @property
    def selected(self) -> IndexableDocument | None:
        return self._best


def create_selector(
    mode: SelectionMode | str = SelectionMode.RANDOM,
    rng: random.Random | None = None,
) -> ReservoirSelector | TopScoreSelector:
    """Return a fresh selector for one query."""

    resolved = SelectionMode(mode)
    if resolved is SelectionMode.TOP_SCORE:
        return TopScoreSelector()
    return ReservoirSelector(rng)


def select_one(
    matches: Iterable[MatchResult],
    mode: SelectionMode | str = SelectionMode.RANDOM,
    rng: random.Random | None = None,
) -> IndexableDocument | None:
    """Consume ``matches`` once and return the chosen document, or None if empty."""

    selector = create_selector(mode, rng)
    for match in matches:
        selector.offer(match)
    return selector.selected
