"""Search data models."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Protocol, runtime_checkable


MATCH_ALL_FIELD = "match_all"
MATCH_ALL_VALUE = "true"


@runtime_checkable
class IndexableDocument(Protocol):
    """Anything that exposes an integer id and raw field values for indexing."""

    @property
    def doc_id(self) -> int:  # pragma: no cover - interface definition
        ...

    def indexable_fields(self) -> Mapping[str, Sequence[str]]:  # pragma: no cover - interface definition
        ...


@dataclass(frozen=True)
class Document:
    """Generic document: an id plus ordered raw values per field.

    A bare string value is one value, not a sequence of characters.
    """

    doc_id: int
    fields: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = {
            name: (values,) if isinstance(values, str) else tuple(values) for name, values in self.fields.items()
        }
        object.__setattr__(self, "fields", MappingProxyType(frozen))

    def indexable_fields(self) -> Mapping[str, Sequence[str]]:
        return self.fields


@dataclass(frozen=True)
class ArtDocument:
    """One ASCII-art file from the corpus."""

    doc_id: int
    blob: str
    tags: tuple[str, ...] = ()
    path: Path | None = None

    def indexable_fields(self) -> Mapping[str, Sequence[str]]:
        return {
            "blob": [self.blob],
            "tags": list(self.tags),
            MATCH_ALL_FIELD: [MATCH_ALL_VALUE],
        }


@dataclass(frozen=True)
class Posting:
    """A posting records how often a term occurs in one document field."""

    doc_id: int
    frequency: int = 1


@dataclass(frozen=True)
class MatchResult:
    """A matching document emitted during evaluation; never stored."""

    doc_id: int
    score: float
    document: IndexableDocument
