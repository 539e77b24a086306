"""
Exception hierarchy for indexing and search.

DocseekError
├── IndexingError          (build time, per document)
│   └── ExtractionError    text extractor could not read/parse a document
├── QueryError             (query time, per request)
│   ├── DecodeError        query body is not valid UTF-8
│   └── EncodingError      results could not be encoded for the response
└── SerializationError     persisted index is malformed or truncated
"""

from typing import Optional


class DocseekError(Exception):
    """Base class for all docseek errors"""


class IndexingError(DocseekError):
    """A document could not be added to the index"""

    def __init__(self, document_id: str, reason: str):
        super().__init__(f"{document_id}: {reason}")
        self.document_id = document_id
        self.reason = reason


class ExtractionError(IndexingError):
    """Text extraction failed for a document"""


class QueryError(DocseekError):
    """A single query could not be answered"""


class DecodeError(QueryError):
    """Query bytes are not valid text (client-side failure)"""


class EncodingError(QueryError):
    """Search results could not be encoded (server-side failure)"""


class SerializationError(DocseekError):
    """Persisted index is unusable"""

    def __init__(self, message: str, source: Optional[str] = None):
        if source:
            message = f"{source}: {message}"
        super().__init__(message)
        self.source = source
