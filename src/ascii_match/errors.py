"""Exception hierarchy for ascii-match.

Only construction-time contract checks and corpus I/O raise. A query that
matches nothing is a normal outcome and is reported as ``None``.
"""

from __future__ import annotations


class AsciiMatchError(Exception):
    """Base class for all ascii-match errors."""


class ContractViolation(AsciiMatchError):
    """A programming contract was broken while wiring the engine together."""


class DuplicateDocumentError(ContractViolation):
    """Two documents share an identifier, or identifiers are not sequential."""

    def __init__(self, doc_id: int, message: str | None = None) -> None:
        self.doc_id = doc_id
        super().__init__(message or f"Duplicate document id: {doc_id}")


class AnalyzerConfigError(ContractViolation):
    """An analyzer, normalizer or tokenizer was configured with invalid options."""


class QueryConfigError(ContractViolation):
    """A query node was constructed with invalid parameters."""


class CorpusError(AsciiMatchError):
    """The corpus could not be loaded from storage."""
