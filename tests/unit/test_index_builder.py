"""
Unit tests for the corpus index builder.
"""

import logging

import pytest
from docseek.tfidf.errors import ExtractionError
from docseek.tfidf.index_builder import (
    CorpusIndex,
    IndexingFailure,
    build_index,
    build_index_from_texts,
)


def extractor_for(texts, failing=()):
    """Extractor over an in-memory corpus that fails for selected ids"""
    def extract(document_id):
        if document_id in failing:
            raise ExtractionError(document_id, "malformed XML: no element found")
        return texts[document_id]
    return extract


class TestBuildIndex:
    """Test batch index construction"""

    def test_indexes_every_document(self, gl_corpus):
        """Each document gets its own table keyed by id"""
        result = build_index(gl_corpus, extractor_for(gl_corpus))

        assert result.indexed_count == 4
        assert result.failed_count == 0
        assert set(result.index) == set(gl_corpus)
        assert result.index["docs/glClear.xhtml"]["GLCLEAR"] == 1

    def test_partial_failure_skips_and_reports(self, caplog):
        """One failed extraction does not abort the batch and is reported"""
        texts = {
            "a.xml": "alpha beta",
            "b.xml": "<broken",
            "c.xml": "gamma beta",
        }

        with caplog.at_level(logging.WARNING, logger="docseek.tfidf.index_builder"):
            result = build_index(["a.xml", "b.xml", "c.xml"], extractor_for(texts, failing={"b.xml"}))

        assert set(result.index) == {"a.xml", "c.xml"}
        assert result.failed_count == 1
        assert result.failed_ids == ["b.xml"]
        assert result.failures[0] == IndexingFailure("b.xml", "malformed XML: no element found")
        assert "b.xml" in caplog.text

    def test_other_errors_propagate(self):
        """Only extraction failures are skipped; bugs still surface"""
        def extract(document_id):
            raise KeyError(document_id)

        with pytest.raises(KeyError):
            build_index(["a.xml"], extract)

    def test_duplicate_ids_indexed_once(self):
        """Document ids are unique in the index"""
        result = build_index_from_texts([("a", "first text"), ("a", "second text")])

        assert list(result.index) == ["a"]
        assert result.index["a"]["FIRST"] == 1
        assert result.failed_ids == ["a"]

    def test_empty_batch(self):
        """No documents gives an empty index"""
        result = build_index([], extractor_for({}))
        assert len(result.index) == 0
        assert result.failures == []


class TestCorpusIndex:
    """Test the immutable corpus index"""

    def test_document_frequency(self, gl_corpus):
        """df counts documents, not occurrences"""
        index = build_index_from_texts(gl_corpus.items()).index

        assert index.document_frequency("TEXTURE") == 2
        assert index.document_frequency("THE") == 1
        assert index.document_frequency("MISSING") == 0
        assert index.document_count == 4

    def test_document_frequency_counts_each_document_once(self):
        """Repeated terms inside one document count once for df"""
        index = build_index_from_texts([("a", "x x x"), ("b", "x y")]).index
        assert index.document_frequencies == {"X": 2, "Y": 1}

    def test_read_only(self, gl_corpus):
        """The index exposes no mutation path"""
        index = build_index_from_texts(gl_corpus.items()).index

        with pytest.raises(TypeError):
            index["new.xhtml"] = index["docs/glClear.xhtml"]
        assert not hasattr(index, "add")

    def test_equality_by_content(self):
        """Indexes with the same tables are equal regardless of insertion order"""
        first = build_index_from_texts([("a", "x y"), ("b", "z")]).index
        second = build_index_from_texts([("b", "z"), ("a", "y x")]).index
        assert first == second
        assert first != CorpusIndex()
