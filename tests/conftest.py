"""Shared test fixtures."""

from __future__ import annotations

import os
import random

import pytest

from ascii_match.search.index import InvertedIndex
from ascii_match.search.models import ArtDocument
from ascii_match.search.schema import create_default_schema


@pytest.fixture(autouse=True)
def _clean_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment variables out of Settings()."""
    for key in list(os.environ):
        if key.upper().startswith("ASCII_MATCH_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def pet_documents() -> list[ArtDocument]:
    return [
        ArtDocument(doc_id=0, blob="a happy cat", tags=("cat.txt",)),
        ArtDocument(doc_id=1, blob="a happy dog", tags=("dog.txt",)),
    ]


@pytest.fixture
def pet_index(pet_documents: list[ArtDocument]) -> InvertedIndex:
    return InvertedIndex.build(pet_documents, create_default_schema())


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)
