"""Unit tests for the inverted index."""

from __future__ import annotations

import pytest

from ascii_match.errors import ContractViolation, DuplicateDocumentError
from ascii_match.search.index import InvertedIndex
from ascii_match.search.models import ArtDocument, Document, Posting
from ascii_match.search.schema import FieldSpec, Schema, create_default_schema


def _corpus() -> list[ArtDocument]:
    blobs = [
        "a happy cat",
        "a sad cat sitting on a mat",
        "dog chasing cat",
        "R2D2 and C3PO",
        "",
        "cat cat cat",
    ]
    return [ArtDocument(doc_id=i, blob=blob, tags=(f"art{i}.txt",)) for i, blob in enumerate(blobs)]


@pytest.mark.unit
class TestInvertedIndexBuild:
    def test_postings_hold_frequency_and_doc_ids(self, pet_index):
        assert pet_index.postings("blob", "happy") == (Posting(0, 1), Posting(1, 1))
        assert pet_index.postings("blob", "cat") == (Posting(0, 1),)
        assert pet_index.postings("blob", "happycat") == (Posting(0, 1),)

    def test_absent_term_or_field_is_empty(self, pet_index):
        assert pet_index.postings("blob", "unicorn") == ()
        assert pet_index.postings("nope", "cat") == ()

    def test_frequency_counts_repeats(self):
        index = InvertedIndex.build(_corpus(), create_default_schema())
        assert Posting(5, 3) in index.postings("blob", "cat")

    def test_postings_sorted_by_doc_id(self):
        index = InvertedIndex.build(_corpus(), create_default_schema())
        for field_name in index.fields:
            for term in index.vocabulary(field_name):
                ids = [p.doc_id for p in index.postings(field_name, term)]
                assert ids == sorted(set(ids))

    def test_every_indexed_term_finds_its_document(self):
        documents = _corpus()
        schema = create_default_schema()
        index = InvertedIndex.build(documents, schema)
        for doc in documents:
            for field_name, values in doc.indexable_fields().items():
                analyzer = schema.analyzer_for(field_name)
                for value in values:
                    for term in analyzer.analyze_index(value):
                        assert doc.doc_id in {p.doc_id for p in index.postings(field_name, term)}

    def test_empty_field_contributes_no_postings(self):
        index = InvertedIndex.build([Document(0, {"blob": ("",), "tags": ()})], create_default_schema())
        assert index.vocabulary("blob") == []
        assert index.vocabulary("tags") == []
        assert index.doc_count == 1

    def test_bare_string_field_value_is_one_value(self):
        doc = Document(0, {"blob": "happy cat", "tags": ["cat.txt"]})
        assert doc.fields["blob"] == ("happy cat",)
        index = InvertedIndex.build([doc], create_default_schema())
        assert index.vocabulary("blob") == ["cat", "happy", "happycat"]

    def test_match_all_field_indexed_for_every_document(self, pet_index):
        assert [p.doc_id for p in pet_index.postings("match_all", "true")] == [0, 1]

    def test_posting_ids_within_corpus(self):
        index = InvertedIndex.build(_corpus(), create_default_schema())
        for field_name in index.fields:
            for term in index.vocabulary(field_name):
                for posting in index.postings(field_name, term):
                    assert 0 <= posting.doc_id < index.doc_count
                    assert index.document(posting.doc_id).doc_id == posting.doc_id

    def test_documents_are_referenced_not_copied(self, pet_documents, pet_index):
        assert pet_index.document(1) is pet_documents[1]

    def test_input_order_does_not_matter(self, pet_documents):
        index = InvertedIndex.build(list(reversed(pet_documents)), create_default_schema())
        assert [doc.doc_id for doc in index.documents()] == [0, 1]

    def test_parallel_build_matches_serial_build(self):
        schema = create_default_schema()
        serial = InvertedIndex.build(_corpus(), schema)
        parallel = InvertedIndex.build(_corpus(), schema, max_workers=4)
        for field_name in serial.fields:
            assert serial.vocabulary(field_name) == parallel.vocabulary(field_name)
            for term in serial.vocabulary(field_name):
                assert serial.postings(field_name, term) == parallel.postings(field_name, term)

    def test_stats(self, pet_index):
        stats = {entry.field: entry for entry in pet_index.stats()}
        assert stats["match_all"].term_count == 1
        assert stats["match_all"].posting_count == 2


@pytest.mark.unit
class TestInvertedIndexContract:
    def test_duplicate_ids_rejected(self):
        docs = [ArtDocument(0, "a"), ArtDocument(0, "b")]
        with pytest.raises(DuplicateDocumentError) as exc_info:
            InvertedIndex.build(docs, create_default_schema())
        assert exc_info.value.doc_id == 0

    def test_gap_in_ids_rejected(self):
        docs = [ArtDocument(0, "a"), ArtDocument(2, "b")]
        with pytest.raises(ContractViolation):
            InvertedIndex.build(docs, create_default_schema())

    def test_duplicate_schema_field_rejected(self):
        with pytest.raises(ContractViolation):
            Schema(fields=[FieldSpec("blob"), FieldSpec("blob")])

    def test_zero_shingle_width_rejected_at_schema_time(self):
        with pytest.raises(ContractViolation):
            create_default_schema(shingle_width=0)


@pytest.mark.unit
class TestTerms:
    def test_terms_uses_query_side_analyzer(self, pet_index):
        term_set = pet_index.terms("blob", "Happy happy CAT!")
        assert term_set.field == "blob"
        assert term_set.terms == ("happy", "cat")

    def test_unconfigured_field_yields_empty_terms(self, pet_index):
        assert pet_index.terms("title", "cat").is_empty()

    def test_empty_query_yields_empty_terms(self, pet_index):
        assert pet_index.terms("blob", "").is_empty()
        assert pet_index.terms("blob", "?!#").is_empty()

