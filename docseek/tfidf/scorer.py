"""
TF-IDF scorer over a CorpusIndex.

Formula:
    tf(t, d)  = count(t, d) / token_count(d)
    idf(t)    = ln(N / max(1, df(t)))
    score(d)  = Σ tf(t, d) × idf(t)   for every query term t

Where:
    N      = number of documents in the index
    df(t)  = number of documents containing t

Ranking policy:
    - Documents sharing no term with the query are left out of the results
    - Higher score first; equal scores ordered by document id ascending
    - An empty query returns no results
"""

import math
from typing import Dict, List, NamedTuple, Optional, Sequence

from .index_builder import CorpusIndex
from .term_frequency import TermFrequencyTable


class ScoredResult(NamedTuple):
    """One ranked document"""
    document_id: str
    score: float


def _rank_key(result: ScoredResult):
    return (-result.score, result.document_id)


class TfIdfScorer:
    """
    TF-IDF ranking over one (immutable) corpus index.

    IDF values are memoized per scorer; the index never changes underneath,
    so a scorer can be shared by concurrent readers of the same snapshot.
    """

    def __init__(self, index: CorpusIndex):
        self.index = index
        self._idf_cache: Dict[str, float] = {}

    def idf(self, term: str) -> float:
        """
        Inverse document frequency of a term.

        Terms absent from every document get df clamped to 1 so the
        logarithm stays finite.
        """
        cached = self._idf_cache.get(term)
        if cached is not None:
            return cached

        n = self.index.document_count
        if n == 0:
            value = 0.0
        else:
            value = math.log(n / max(1, self.index.document_frequency(term)))

        self._idf_cache[term] = value
        return value

    def score(self, query_terms: Sequence[str], table: TermFrequencyTable) -> float:
        """
        Compute the TF-IDF score of one document.

        Args:
            query_terms: Normalized query terms (repeats count repeatedly)
            table: Term frequencies of the document

        Returns:
            Score (0.0 for empty documents or no overlap)

        Example:
            >>> scorer.score(["TEXTURE"], index["glBindTexture.xhtml"])
            0.0412...
        """
        if not query_terms or table.token_count == 0:
            return 0.0

        score = 0.0
        for term in query_terms:
            count = table.get(term, 0)
            if count == 0:
                continue
            score += (count / table.token_count) * self.idf(term)

        return score

    def search(self, query_terms: Sequence[str], limit: Optional[int] = None) -> List[ScoredResult]:
        """
        Rank every document that shares at least one term with the query.

        Args:
            query_terms: Normalized query terms
            limit: Keep only the top `limit` results (None = all)

        Returns:
            Results ordered by score descending, then document id ascending

        Raises:
            ValueError: If limit is negative
        """
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")

        if not query_terms:
            return []

        unique_terms = set(query_terms)
        results = []

        for document_id, table in self.index.items():
            if not any(term in table for term in unique_terms):
                continue
            results.append(ScoredResult(document_id, self.score(query_terms, table)))

        results.sort(key=_rank_key)

        if limit is not None:
            results = results[:limit]

        return results


def search(index: CorpusIndex, query_terms: Sequence[str], limit: Optional[int] = None) -> List[ScoredResult]:
    """
    Rank documents of an index against normalized query terms.

    Shorthand for TfIdfScorer(index).search(query_terms, limit).
    """
    return TfIdfScorer(index).search(query_terms, limit=limit)
