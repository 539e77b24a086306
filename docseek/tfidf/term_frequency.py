"""
Per-document term frequency table.

The table maps each term to its occurrence count and caches the total number
of tokens, so document length is available to the ranker without
re-tokenizing.
"""

from collections import Counter
from types import MappingProxyType
from typing import Iterator, Mapping

from .tokenizer import Lexer


class TermFrequencyTable(Mapping):
    """
    Read-only mapping term → count for one document.

    Invariants:
        - every stored count is >= 1 (absent terms are implicitly 0)
        - token_count == sum(counts)
    """

    __slots__ = ("_counts", "_token_count")

    def __init__(self, counts: Mapping[str, int]):
        self._counts = MappingProxyType(dict(counts))
        self._token_count = sum(self._counts.values())

    @classmethod
    def from_counts(cls, counts: Mapping[str, int]) -> "TermFrequencyTable":
        """
        Build a table from an existing mapping, enforcing invariants.

        Raises:
            ValueError: If a count is not a positive integer
        """
        for term, count in counts.items():
            if isinstance(count, bool) or not isinstance(count, int) or count < 1:
                raise ValueError(f"Invalid count for term {term!r}: {count!r}")
        return cls(counts)

    @property
    def token_count(self) -> int:
        """Total number of tokens in the document"""
        return self._token_count

    def __getitem__(self, term: str) -> int:
        return self._counts[term]

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __eq__(self, other) -> bool:
        if isinstance(other, TermFrequencyTable):
            return self._counts == other._counts
        if isinstance(other, Mapping):
            return dict(self._counts) == dict(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"TermFrequencyTable({len(self)} terms, {self._token_count} tokens)"


def build_term_frequencies(text: str) -> TermFrequencyTable:
    """
    Count normalized terms in one document.

    Args:
        text: Plain text of the document

    Returns:
        TermFrequencyTable (empty for empty or whitespace-only text)

    Example:
        >>> table = build_term_frequencies("Texture texture 2D")
        >>> dict(table), table.token_count
        ({'TEXTURE': 2, '2': 1, 'D': 1}, 4)
    """
    return TermFrequencyTable(Counter(Lexer(text).terms()))
