"""
Query service - the synchronous entry point used by the HTTP layer.

answer_query() is a pure function of (index, query bytes): decode → tokenize
→ rank → truncate. It never mutates the index, so concurrent requests need no
locking among themselves.

IndexSnapshot holds the index currently being served. Installing a rebuilt
index is a single reference assignment; readers grab current() once per
request and keep using that object even if a newer one is installed meanwhile.
"""

import json
import logging
import math
from typing import List, Optional, Sequence, Union

from .tfidf.errors import DecodeError, EncodingError
from .tfidf.index_builder import CorpusIndex
from .tfidf.scorer import ScoredResult, TfIdfScorer
from .tfidf.tokenizer import tokenize

logger = logging.getLogger(__name__)

DEFAULT_RESULT_LIMIT = 20


def parse_result_limit(value) -> int:
    """
    Validate a configured top-K (env var, CLI flag).

    Raises:
        ValueError: If value is not an integer >= 1
    """
    limit = int(value)
    if limit < 1:
        raise ValueError(f"result limit must be at least 1, got {limit}")
    return limit


def decode_query(raw: bytes) -> str:
    """
    Decode a query body as UTF-8.

    Raises:
        DecodeError: If the bytes are not valid UTF-8
    """
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"could not interpret query body as UTF-8: {e}") from e


def answer_query(index: CorpusIndex, raw: Union[bytes, str], limit: int = DEFAULT_RESULT_LIMIT) -> List[ScoredResult]:
    """
    Answer one free-text query.

    Args:
        index: Corpus index to search (read only)
        raw: Query body as received (UTF-8 bytes), or already decoded text
        limit: Maximum number of results (top-K)

    Returns:
        At most `limit` results, best first; empty for an empty query

    Raises:
        DecodeError: If the query body is not valid UTF-8
    """
    text = raw if isinstance(raw, str) else decode_query(raw)
    query_terms = tokenize(text)

    if not query_terms:
        return []

    return TfIdfScorer(index).search(query_terms, limit=limit)


def encode_results(results: Sequence[ScoredResult]) -> bytes:
    """
    Encode results as a JSON array of [document_id, score] pairs.

    Raises:
        EncodingError: If a score is not finite or encoding fails
    """
    try:
        for result in results:
            if not math.isfinite(result.score):
                raise EncodingError(f"non-finite score for {result.document_id}: {result.score}")
        payload = [[result.document_id, result.score] for result in results]
        return json.dumps(payload, ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"could not convert search results to JSON: {e}") from e


class IndexSnapshot:
    """Handle on the corpus index currently served"""

    def __init__(self, index: Optional[CorpusIndex] = None):
        self._index = index if index is not None else CorpusIndex()

    def current(self) -> CorpusIndex:
        return self._index

    def install(self, index: CorpusIndex) -> CorpusIndex:
        """
        Replace the served index.

        Returns:
            The previously served index
        """
        previous = self._index
        self._index = index
        logger.info(f"Installed index snapshot: {len(index)} documents (was {len(previous)})")
        return previous
