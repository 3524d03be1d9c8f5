"""Unit tests for the query tree and streaming evaluator."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from ascii_match.errors import QueryConfigError
from ascii_match.search.index import InvertedIndex
from ascii_match.search.models import ArtDocument, MatchResult
from ascii_match.search.query import (
    DisMax,
    MatchAll,
    Or,
    Query,
    TermSet,
    build_query,
    combine_dismax,
    evaluate,
    iter_matches,
)
from ascii_match.search.schema import create_default_schema


class StaticQuery(Query):
    """Yields a fixed, already sorted list of matches."""

    def __init__(self, matches: list[tuple[int, float]]) -> None:
        self._matches = matches

    def matches(self, index) -> Iterator[tuple[int, float]]:
        yield from self._matches


@pytest.fixture
def tagged_index() -> InvertedIndex:
    docs = [
        ArtDocument(0, "a cat", tags=("cat",)),
        ArtDocument(1, "cat", tags=("dog",)),
        ArtDocument(2, "a dog", tags=("dog",)),
        ArtDocument(3, "cat cat cat", tags=("bird",)),
    ]
    return InvertedIndex.build(docs, create_default_schema())


@pytest.mark.unit
class TestTermSetAndOr:
    def test_termset_sums_frequencies(self, tagged_index):
        results = list(TermSet("blob", ("cat", "a")).matches(tagged_index))
        assert results == [(0, 2.0), (1, 1.0), (2, 1.0), (3, 3.0)]

    def test_termset_dedupes_terms(self):
        assert TermSet("blob", ("cat", "cat")).terms == ("cat",)

    def test_empty_termset_matches_nothing(self, tagged_index):
        assert list(TermSet("blob").matches(tagged_index)) == []

    def test_or_is_union_with_summed_scores(self, tagged_index):
        query = Or((TermSet("tags", ("dog",)), TermSet("blob", ("cat",))))
        assert list(query.matches(tagged_index)) == [(0, 1.0), (1, 2.0), (2, 1.0), (3, 3.0)]

    def test_or_without_children(self, tagged_index):
        assert Or().is_empty()
        assert list(Or().matches(tagged_index)) == []


@pytest.mark.unit
class TestDisMax:
    def test_single_matching_child_keeps_its_score(self):
        query = DisMax(0.7, (StaticQuery([(0, 4.0)]), StaticQuery([(1, 2.0)])))
        assert list(query.matches(None)) == [(0, 4.0), (1, 2.0)]

    def test_best_plus_tie_breaker_times_rest(self):
        query = DisMax(0.1, (StaticQuery([(0, 2.0)]), StaticQuery([(0, 3.0)]), StaticQuery([(0, 1.0)])))
        [(doc_id, score)] = list(query.matches(None))
        assert doc_id == 0
        assert score == pytest.approx(3.0 + 0.1 * 3.0)

    def test_increasing_tie_breaker_never_decreases_score(self):
        children = (StaticQuery([(0, 2.0), (1, 5.0)]), StaticQuery([(0, 1.5), (1, 0.5)]))
        previous = {0: float("-inf"), 1: float("-inf")}
        for tie_breaker in (0.0, 0.1, 0.25, 0.5, 0.9, 1.0):
            for doc_id, score in DisMax(tie_breaker, children).matches(None):
                assert score >= previous[doc_id]
                previous[doc_id] = score

    def test_tie_breaker_one_is_plain_sum(self):
        assert combine_dismax([1.0, 2.0, 3.0], 1.0) == pytest.approx(6.0)
        assert combine_dismax([1.0, 2.0, 3.0], 0.0) == pytest.approx(3.0)
        assert combine_dismax([], 0.5) == 0.0

    @pytest.mark.parametrize("tie_breaker", [-0.1, 1.5])
    def test_tie_breaker_out_of_range(self, tie_breaker):
        with pytest.raises(QueryConfigError):
            DisMax(tie_breaker)

    def test_tags_dominate_blob(self, tagged_index):
        query = build_query(tagged_index, "cat")
        scores = dict(query.matches(tagged_index))
        assert scores[0] == pytest.approx(1.0 + 0.1 * 1.0)
        assert scores[1] == pytest.approx(1.0)
        assert scores[3] == pytest.approx(3.0)
        assert 2 not in scores


@pytest.mark.unit
class TestEvaluate:
    def test_streams_in_ascending_doc_order(self, tagged_index):
        seen: list[MatchResult] = []
        evaluate(tagged_index, build_query(tagged_index, "cat dog"), seen.append)
        assert [m.doc_id for m in seen] == [0, 1, 2, 3]
        assert all(m.document is tagged_index.document(m.doc_id) for m in seen)

    def test_empty_query_string_has_no_matches(self, tagged_index):
        seen: list[MatchResult] = []
        query = build_query(tagged_index, "")
        assert query.is_empty()
        evaluate(tagged_index, query, seen.append)
        assert seen == []

    def test_match_all(self, tagged_index):
        assert [m.doc_id for m in iter_matches(tagged_index, MatchAll())] == [0, 1, 2, 3]

    def test_abandoning_the_stream_is_safe(self, tagged_index):
        stream = iter_matches(tagged_index, build_query(tagged_index, "cat"))
        first = next(stream)
        stream.close()
        assert first.doc_id == 0
        assert [m.doc_id for m in iter_matches(tagged_index, build_query(tagged_index, "cat"))] == [0, 1, 3]

    def test_shingle_query_matches_adjacent_words(self, tagged_index):
        assert [m.doc_id for m in iter_matches(tagged_index, build_query(tagged_index, "acat"))] == [0]
