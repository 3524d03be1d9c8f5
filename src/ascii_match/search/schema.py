"""
Schema definition for the inverted index.

A schema names the indexed fields and the analyzer each one uses. The
analyzer decides both the index-time terms and the query-time terms for that
field, so a field missing from the schema simply yields no terms.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ascii_match.errors import ContractViolation
from ascii_match.search.analyzers import Analyzer, get_analyzer


@dataclass(frozen=True)
class FieldSpec:
    """
    Indexed field definition.

    Args:
        name: Field name (e.g., "blob", "tags")
        analyzer_name: Name of analyzer to use (default: None = shingles)
        shingle_width: Window width handed to shingled analyzers
    """

    name: str
    analyzer_name: str | None = None
    shingle_width: int = 2

    def create_analyzer(self) -> Analyzer:
        if self.analyzer_name in (None, "shingles"):
            return get_analyzer(self.analyzer_name, width=self.shingle_width)
        return get_analyzer(self.analyzer_name)


@dataclass
class Schema:
    """
    Set of indexed fields with their analyzers.

    Analyzers are instantiated once here, so a malformed configuration
    (unknown analyzer, shingle width of 0) fails when the schema is built.

    Example:
        schema = Schema(
            fields=[
                FieldSpec("blob"),
                FieldSpec("tags"),
                FieldSpec("match_all", analyzer_name="keyword"),
            ],
        )
    """

    fields: list[FieldSpec]
    name: str = "default"
    _analyzers: dict[str, Analyzer] = field(init=False, repr=False, default_factory=dict)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for spec in self.fields:
            if spec.name in seen:
                msg = f"Field '{spec.name}' defined twice in schema"
                raise ContractViolation(msg)
            seen.add(spec.name)
            self._analyzers[spec.name] = spec.create_analyzer()

    def __contains__(self, name: str) -> bool:
        return name in self._analyzers

    def __iter__(self):
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def field_names(self) -> list[str]:
        return [spec.name for spec in self.fields]

    def analyzer_for(self, field_name: str) -> Analyzer | None:
        """Return the field's analyzer, or None when the field is not indexed."""
        return self._analyzers.get(field_name)


def create_default_schema(shingle_width: int = 2) -> Schema:
    """
    Create the schema used for the art corpus.

    Fields:
    - blob: full text of the art file (shingles analyzer)
    - tags: file name labels (shingles analyzer)
    - match_all: constant "true" on every document (keyword analyzer)
    """
    return Schema(
        name="art",
        fields=[
            FieldSpec("blob", shingle_width=shingle_width),
            FieldSpec("tags", shingle_width=shingle_width),
            FieldSpec("match_all", analyzer_name="keyword"),
        ],
    )
