"""End-to-end tests for the matching engine."""

from __future__ import annotations

from collections import Counter

from prometheus_client import REGISTRY
import pytest

from ascii_match.config import Settings
from ascii_match.errors import QueryConfigError
from ascii_match.search.engine import MatchEngine
from ascii_match.search.models import ArtDocument
from ascii_match.search.selector import SelectionMode


@pytest.fixture
def engine(pet_documents, rng) -> MatchEngine:
    return MatchEngine.from_documents(pet_documents, Settings(), rng=rng)


@pytest.mark.unit
class TestScenarios:
    def test_cat_matches_only_the_cat(self, engine):
        assert engine.candidates("cat") == [0]
        for _ in range(20):
            assert engine.search("cat").doc_id == 0

    def test_happy_matches_both_evenly(self, engine):
        assert engine.candidates("happy") == [0, 1]
        trials = 4000
        counts = Counter(engine.search("happy").doc_id for _ in range(trials))
        assert counts[0] / trials == pytest.approx(0.5, abs=0.05)
        assert counts[1] / trials == pytest.approx(0.5, abs=0.05)

    def test_empty_query_is_no_match(self, engine):
        assert engine.candidates("") == []
        assert engine.search("") is None

    def test_unknown_word_is_no_match(self, engine):
        assert engine.search("unicorn") is None

    def test_tag_match(self, engine):
        assert engine.search("dog.txt").doc_id == 1

    def test_random_document(self, engine):
        assert engine.random_document().doc_id in {0, 1}


@pytest.mark.unit
class TestModes:
    def test_top_score_mode_prefers_frequent_term(self):
        docs = [ArtDocument(0, "a cat"), ArtDocument(1, "cat cat cat"), ArtDocument(2, "dog")]
        settings = Settings(selection_mode="top_score")
        engine = MatchEngine.from_documents(docs, settings)
        assert engine.selection_mode is SelectionMode.TOP_SCORE
        assert engine.search("cat").doc_id == 1

    def test_settings_flow_into_engine(self, pet_documents):
        engine = MatchEngine.from_documents(pet_documents, Settings(tie_breaker=0.5, shingle_width=3))
        assert engine.tie_breaker == 0.5
        assert engine.index.schema.fields[0].shingle_width == 3

    def test_invalid_tie_breaker(self, pet_index):
        with pytest.raises(QueryConfigError):
            MatchEngine(pet_index, tie_breaker=1.5)

    def test_empty_corpus(self):
        engine = MatchEngine.from_documents([], Settings())
        assert engine.doc_count == 0
        assert engine.search("cat") is None
        assert engine.random_document() is None


@pytest.mark.unit
def test_search_records_metrics(engine):
    labels = {"outcome": "no_match"}
    before = REGISTRY.get_sample_value("ascii_match_searches_total", labels) or 0.0
    engine.search("unicorn")
    after = REGISTRY.get_sample_value("ascii_match_searches_total", labels)
    assert after == before + 1

    latency = REGISTRY.get_sample_value("ascii_match_search_latency_seconds_count", {"mode": "random"})
    assert latency and latency >= 1
