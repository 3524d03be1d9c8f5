"""In-memory inverted index.

The index is built once from the full corpus and is read-only afterwards, so
any number of queries may read it concurrently without locking. Postings for
every (field, term) pair are kept sorted by document id, which lets the query
evaluator stream matches in ascending id order without sorting.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
from types import MappingProxyType

from ascii_match.errors import DuplicateDocumentError
from ascii_match.search.models import IndexableDocument, Posting
from ascii_match.search.query import TermSet
from ascii_match.search.schema import Schema


logger = logging.getLogger(__name__)

_EMPTY: tuple[Posting, ...] = ()

# field name -> term -> frequency, for one document
_DocumentTerms = dict[str, Counter[str]]


@dataclass(frozen=True)
class FieldStats:
    """Size of one field's postings."""

    field: str
    term_count: int
    posting_count: int


class InvertedIndex:
    """Per-field mapping of term -> postings sorted by document id."""

    def __init__(
        self,
        schema: Schema,
        documents: Sequence[IndexableDocument],
        postings: Mapping[str, Mapping[str, tuple[Posting, ...]]],
    ) -> None:
        self.schema = schema
        self._documents = tuple(documents)
        self._postings = MappingProxyType(
            {field: MappingProxyType(dict(terms)) for field, terms in postings.items()}
        )

    @classmethod
    def build(
        cls,
        documents: Iterable[IndexableDocument],
        schema: Schema,
        *,
        max_workers: int = 1,
    ) -> InvertedIndex:
        """Index every document once.

        Document ids must be unique and sequential starting at 0. When
        ``max_workers`` > 1 documents are analyzed in a thread pool; the
        results are merged here, in id order, by the calling thread only.
        """

        ordered = _order_documents(documents)

        if max_workers > 1 and len(ordered) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                analyzed = list(executor.map(lambda doc: _analyze_document(doc, schema), ordered))
        else:
            analyzed = [_analyze_document(doc, schema) for doc in ordered]

        builders: dict[str, dict[str, list[Posting]]] = {name: defaultdict(list) for name in schema.field_names}
        for doc, field_terms in zip(ordered, analyzed):
            for field_name, counts in field_terms.items():
                terms = builders[field_name]
                for term, frequency in counts.items():
                    terms[term].append(Posting(doc_id=doc.doc_id, frequency=frequency))

        postings = {
            field_name: {term: tuple(entries) for term, entries in terms.items()}
            for field_name, terms in builders.items()
        }
        index = cls(schema, ordered, postings)
        logger.info(
            "Indexed %d documents across %d fields (%d terms)",
            index.doc_count,
            len(schema),
            sum(len(terms) for terms in postings.values()),
        )
        return index

    @property
    def doc_count(self) -> int:
        return len(self._documents)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self._postings)

    def document(self, doc_id: int) -> IndexableDocument:
        return self._documents[doc_id]

    def documents(self) -> tuple[IndexableDocument, ...]:
        return self._documents

    def postings(self, field_name: str, term: str) -> tuple[Posting, ...]:
        """Return the sorted postings for ``term``; empty when absent."""
        terms = self._postings.get(field_name)
        if terms is None:
            return _EMPTY
        return terms.get(term, _EMPTY)

    def vocabulary(self, field_name: str) -> list[str]:
        return sorted(self._postings.get(field_name, {}))

    def terms(self, field_name: str, query_string: str) -> TermSet:
        """Analyze ``query_string`` with the field's query-time analyzer.

        An unconfigured field or a string that normalizes to nothing gives an
        empty term set, which matches no documents.
        """
        analyzer = self.schema.analyzer_for(field_name)
        if analyzer is None:
            return TermSet(field_name, ())
        return TermSet(field_name, tuple(analyzer.analyze_search(query_string)))

    def stats(self) -> list[FieldStats]:
        return [
            FieldStats(
                field=field_name,
                term_count=len(terms),
                posting_count=sum(len(entries) for entries in terms.values()),
            )
            for field_name, terms in self._postings.items()
        ]


def _order_documents(documents: Iterable[IndexableDocument]) -> list[IndexableDocument]:
    by_id: dict[int, IndexableDocument] = {}
    for doc in documents:
        if doc.doc_id in by_id:
            raise DuplicateDocumentError(doc.doc_id)
        by_id[doc.doc_id] = doc

    ordered = [by_id[doc_id] for doc_id in sorted(by_id)]
    for expected, doc in enumerate(ordered):
        if doc.doc_id != expected:
            msg = f"Document ids must be sequential from 0; expected {expected}, got {doc.doc_id}"
            raise DuplicateDocumentError(doc.doc_id, msg)
    return ordered


def _analyze_document(doc: IndexableDocument, schema: Schema) -> _DocumentTerms:
    out: _DocumentTerms = {}
    fields = doc.indexable_fields()
    for field_name in schema.field_names:
        values = fields.get(field_name)
        if not values:
            continue
        analyzer = schema.analyzer_for(field_name)
        counts: Counter[str] = Counter()
        for value in values:
            counts.update(analyzer.analyze_index(value))
        if counts:
            out[field_name] = counts
    return out
