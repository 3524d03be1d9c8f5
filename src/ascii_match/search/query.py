"""Composable query tree and its streaming evaluator.

Every node yields ``(doc_id, score)`` pairs in strictly ascending document id
order. Postings are already sorted, so nodes combine their children with
``heapq.merge`` and only ever hold the scores of the document currently being
combined. Evaluation can be abandoned at any point: nothing shared is
mutated.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
import heapq
from itertools import groupby
from operator import itemgetter
from typing import TYPE_CHECKING

from ascii_match.errors import QueryConfigError
from ascii_match.search.models import MatchResult


if TYPE_CHECKING:
    from ascii_match.search.index import InvertedIndex


Match = tuple[int, float]

DEFAULT_TIE_BREAKER = 0.1

_by_doc_id = itemgetter(0)


class Query(ABC):
    """Base class for query nodes."""

    @abstractmethod
    def matches(self, index: InvertedIndex) -> Iterator[Match]:
        """Yield ``(doc_id, score)`` in ascending doc id order."""

    def is_empty(self) -> bool:
        return False


@dataclass(frozen=True)
class TermSet(Query):
    """Disjunction of terms within one field; score is the summed frequency."""

    field: str
    terms: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "terms", tuple(dict.fromkeys(self.terms)))

    def is_empty(self) -> bool:
        return not self.terms

    def matches(self, index: InvertedIndex) -> Iterator[Match]:
        streams = [
            ((posting.doc_id, float(posting.frequency)) for posting in index.postings(self.field, term))
            for term in self.terms
        ]
        return _sum_by_doc(streams)


@dataclass(frozen=True)
class Or(Query):
    """Union of the children; a document's score is the sum of its child scores."""

    children: tuple[Query, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))

    def is_empty(self) -> bool:
        return all(child.is_empty() for child in self.children)

    def matches(self, index: InvertedIndex) -> Iterator[Match]:
        return _sum_by_doc([child.matches(index) for child in self.children])


@dataclass(frozen=True)
class DisMax(Query):
    """Best child score plus ``tie_breaker`` times the other matching child scores.

    With a single matching child the score is that child's score exactly. A
    ``tie_breaker`` of 0 lets the best field win outright; 1 turns this into a
    plain sum across children.
    """

    tie_breaker: float = DEFAULT_TIE_BREAKER
    children: tuple[Query, ...] = ()

    def __post_init__(self) -> None:
        if not 0.0 <= self.tie_breaker <= 1.0:
            msg = f"DisMax tie_breaker must be within [0, 1], got {self.tie_breaker}"
            raise QueryConfigError(msg)
        object.__setattr__(self, "children", tuple(self.children))

    def is_empty(self) -> bool:
        return all(child.is_empty() for child in self.children)

    def matches(self, index: InvertedIndex) -> Iterator[Match]:
        merged = heapq.merge(*(child.matches(index) for child in self.children), key=_by_doc_id)
        for doc_id, group in groupby(merged, key=_by_doc_id):
            scores = [score for _, score in group]
            yield doc_id, combine_dismax(scores, self.tie_breaker)


@dataclass(frozen=True)
class MatchAll(Query):
    """Matches every indexed document with a constant score."""

    score: float = 1.0

    def matches(self, index: InvertedIndex) -> Iterator[Match]:
        for doc_id in range(index.doc_count):
            yield doc_id, self.score


def combine_dismax(scores: Sequence[float], tie_breaker: float) -> float:
    if not scores:
        return 0.0
    best = max(scores)
    return best + tie_breaker * (sum(scores) - best)


def _sum_by_doc(streams: list[Iterator[Match]]) -> Iterator[Match]:
    merged = heapq.merge(*streams, key=_by_doc_id)
    for doc_id, group in groupby(merged, key=_by_doc_id):
        yield doc_id, sum(score for _, score in group)


def iter_matches(index: InvertedIndex, query: Query) -> Iterator[MatchResult]:
    """Stream match results for ``query``; an empty query yields nothing."""
    for doc_id, score in query.matches(index):
        yield MatchResult(doc_id=doc_id, score=score, document=index.document(doc_id))


def evaluate(index: InvertedIndex, query: Query, consumer: Callable[[MatchResult], None]) -> None:
    """Push every match of ``query`` to ``consumer`` in ascending doc id order."""
    for match in iter_matches(index, query):
        consumer(match)


def build_query(
    index: InvertedIndex,
    query_string: str,
    *,
    tie_breaker: float = DEFAULT_TIE_BREAKER,
    fields: Sequence[str] = ("tags", "blob"),
) -> DisMax:
    """Build the default tags/blob disjunction-max query for free text.

    Never fails: text that normalizes to nothing produces an empty query.
    """
    children = tuple(Or((index.terms(field_name, query_string),)) for field_name in fields)
    return DisMax(tie_breaker, children)
