"""
Corpus index builder - aggregates per-document term frequencies.

Builds the whole index in one pass and hands back an immutable CorpusIndex
together with a report of documents that could not be indexed. Failed
documents are skipped, never fatal for the batch.
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Tuple

from .errors import ExtractionError
from .term_frequency import TermFrequencyTable, build_term_frequencies

logger = logging.getLogger(__name__)


class CorpusIndex(Mapping):
    """
    Read-only mapping DocumentId → TermFrequencyTable.

    Document frequencies are computed once at construction. There is no
    mutation API: a new corpus means a new CorpusIndex.
    """

    __slots__ = ("_documents", "_document_frequency")

    def __init__(self, documents: Mapping[str, TermFrequencyTable] = None):
        documents = dict(documents or {})

        document_frequency: Dict[str, int] = {}
        for table in documents.values():
            for term in table:
                document_frequency[term] = document_frequency.get(term, 0) + 1

        self._documents = MappingProxyType(documents)
        self._document_frequency = MappingProxyType(document_frequency)

    @property
    def document_count(self) -> int:
        return len(self._documents)

    @property
    def document_frequencies(self) -> Mapping[str, int]:
        """term → number of documents containing it"""
        return self._document_frequency

    def document_frequency(self, term: str) -> int:
        return self._document_frequency.get(term, 0)

    def __getitem__(self, document_id: str) -> TermFrequencyTable:
        return self._documents[document_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def __eq__(self, other) -> bool:
        if isinstance(other, CorpusIndex):
            return dict(self._documents) == dict(other._documents)
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"CorpusIndex({len(self)} documents, {len(self._document_frequency)} terms)"


@dataclass(frozen=True)
class IndexingFailure:
    """A document that was skipped during a build"""
    document_id: str
    reason: str


@dataclass
class IndexBuildResult:
    """Outcome of a batch build: the index plus every skipped document"""
    index: CorpusIndex
    failures: List[IndexingFailure] = field(default_factory=list)

    @property
    def indexed_count(self) -> int:
        return len(self.index)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def failed_ids(self) -> List[str]:
        return [failure.document_id for failure in self.failures]


def build_index(
    document_ids: Iterable[str],
    extract_text: Callable[[str], str],
) -> IndexBuildResult:
    """
    Build a corpus index from documents.

    Each document is extracted and tokenized independently. If extraction
    raises ExtractionError the document is logged, recorded in the result's
    failures and skipped; the rest of the batch is still indexed.

    Args:
        document_ids: Identifiers of the documents to index (paths)
        extract_text: Text extractor, called once per document id

    Returns:
        IndexBuildResult with the CorpusIndex and the failure report

    Example:
        >>> texts = {"a.txt": "red green", "b.txt": "green blue"}
        >>> result = build_index(texts, texts.__getitem__)
        >>> result.indexed_count, result.index.document_frequency("GREEN")
        (2, 2)
    """
    documents: Dict[str, TermFrequencyTable] = {}
    failures: List[IndexingFailure] = []

    for document_id in document_ids:
        if document_id in documents:
            logger.warning(f"Skipping duplicate document id: {document_id}")
            failures.append(IndexingFailure(document_id, "duplicate document id"))
            continue

        logger.debug(f"Indexing {document_id}...")

        try:
            text = extract_text(document_id)
        except ExtractionError as e:
            logger.warning(f"Skipping {document_id}: {e.reason}")
            failures.append(IndexingFailure(document_id, e.reason))
            continue

        table = build_term_frequencies(text)
        documents[document_id] = table

        logger.debug(f"{document_id}: {len(table)} unique terms, {table.token_count} tokens")

    index = CorpusIndex(documents)

    logger.info(
        f"Indexed {len(index)} documents ({len(index.document_frequencies)} unique terms), "
        f"skipped {len(failures)}"
    )

    return IndexBuildResult(index=index, failures=failures)


def build_index_from_texts(documents: Iterable[Tuple[str, str]]) -> IndexBuildResult:
    """
    Build a corpus index from already-extracted (document_id, text) pairs.

    Args:
        documents: Pairs of document id and plain text

    Returns:
        IndexBuildResult (failures only for duplicate ids)
    """
    pairs = list(documents)
    texts: Dict[str, str] = {}
    for document_id, text in pairs:
        texts.setdefault(document_id, text)
    return build_index((document_id for document_id, _ in pairs), texts.__getitem__)
