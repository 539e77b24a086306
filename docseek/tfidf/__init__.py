"""
TF-IDF indexing and retrieval engine.

Components:
- tokenizer: Lexer producing numeric/word/symbol tokens and normalized terms
- term_frequency: Per-document term → count table with cached token count
- index_builder: Immutable corpus index and batch builder with failure report
- persistence: JSON save/load of the corpus index
- scorer: TF-IDF ranking with deterministic tie-breaking
- errors: Exception hierarchy shared by the engine and its callers
"""

from .errors import (
    DecodeError,
    DocseekError,
    EncodingError,
    ExtractionError,
    IndexingError,
    QueryError,
    SerializationError,
)
from .tokenizer import Lexer, Token, TokenKind, iter_tokens, normalize, tokenize
from .term_frequency import TermFrequencyTable, build_term_frequencies
from .index_builder import (
    CorpusIndex,
    IndexBuildResult,
    IndexingFailure,
    build_index,
    build_index_from_texts,
)
from .persistence import load, load_index_file, save, save_index_file
from .scorer import ScoredResult, TfIdfScorer, search

__all__ = [
    "DecodeError",
    "DocseekError",
    "EncodingError",
    "ExtractionError",
    "IndexingError",
    "QueryError",
    "SerializationError",
    "Lexer",
    "Token",
    "TokenKind",
    "iter_tokens",
    "normalize",
    "tokenize",
    "TermFrequencyTable",
    "build_term_frequencies",
    "CorpusIndex",
    "IndexBuildResult",
    "IndexingFailure",
    "build_index",
    "build_index_from_texts",
    "load",
    "load_index_file",
    "save",
    "save_index_file",
    "ScoredResult",
    "TfIdfScorer",
    "search",
]
