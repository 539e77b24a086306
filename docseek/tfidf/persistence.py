"""
Index persistence - JSON map of maps, validated with pydantic on load.

File layout (UTF-8, indented, keys sorted so diffs stay readable):

{
  "documents": {
    "docs.gl/gl4/glBindTexture.xhtml": {
      "terms": {"BIND": 3, "TEXTURE": 12, ...},
      "token_count": 412
    }
  },
  "format": "docseek-tf-index",
  "version": 1
}

New per-document aggregates go next to "token_count"/"terms" and bump
"version"; readers reject versions they do not know.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from .errors import SerializationError
from .index_builder import CorpusIndex
from .term_frequency import TermFrequencyTable

logger = logging.getLogger(__name__)

INDEX_FORMAT = "docseek-tf-index"
INDEX_VERSION = 1


class DocumentEntry(BaseModel):
    """Persisted form of one TermFrequencyTable"""
    model_config = ConfigDict(extra="forbid", strict=True)

    token_count: int
    terms: Dict[str, int]

    @model_validator(mode="after")
    def check_counts(self) -> "DocumentEntry":
        bad = [term for term, count in self.terms.items() if count < 1]
        if bad:
            raise ValueError(f"non-positive counts for terms: {bad[:5]}")
        total = sum(self.terms.values())
        if total != self.token_count:
            raise ValueError(f"token_count {self.token_count} does not match sum of counts {total}")
        return self


class IndexFile(BaseModel):
    """Top-level persisted index document"""
    model_config = ConfigDict(extra="forbid", strict=True)

    format: Literal["docseek-tf-index"]
    version: Literal[1]
    documents: Dict[str, DocumentEntry]


def save(index: CorpusIndex) -> bytes:
    """
    Serialize a corpus index.

    Args:
        index: Index to serialize

    Returns:
        UTF-8 encoded JSON bytes
    """
    payload = {
        "format": INDEX_FORMAT,
        "version": INDEX_VERSION,
        "documents": {
            document_id: {
                "token_count": table.token_count,
                "terms": dict(table),
            }
            for document_id, table in index.items()
        },
    }
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False).encode("utf-8")


def load(data: bytes, source: str = None) -> CorpusIndex:
    """
    Deserialize a corpus index.

    Args:
        data: Bytes produced by save()
        source: Where the bytes came from (for error messages only)

    Returns:
        CorpusIndex (zero documents for a saved empty index)

    Raises:
        SerializationError: If the payload is empty, not UTF-8, not JSON,
            or does not match the index schema
    """
    if not data or not data.strip():
        raise SerializationError("index payload is empty (truncated file?)", source)

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SerializationError(f"index is not valid UTF-8: {e}", source) from e

    try:
        parsed = IndexFile.model_validate_json(text)
    except ValidationError as e:
        raise SerializationError(f"index does not match schema: {e}", source) from e

    documents = {
        document_id: TermFrequencyTable.from_counts(entry.terms)
        for document_id, entry in parsed.documents.items()
    }
    return CorpusIndex(documents)


def save_index_file(index: CorpusIndex, path: Union[str, Path]) -> Path:
    """
    Write an index file atomically (temp file in the same directory, then replace).

    Args:
        index: Index to write
        path: Destination file

    Returns:
        Resolved destination path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = save(index)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info(f"Saved index with {len(index)} documents to {path} ({len(data)} bytes)")
    return path


def load_index_file(path: Union[str, Path]) -> CorpusIndex:
    """
    Read an index file.

    Raises:
        SerializationError: If the file cannot be read or is malformed
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise SerializationError(f"could not read index file: {e}", str(path)) from e

    index = load(data, source=str(path))
    logger.info(f"{path} contains {len(index)} documents")
    return index
