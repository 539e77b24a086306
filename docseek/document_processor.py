"""
Text extraction for indexing.

Turns a source document into plain text for the tokenizer:
- XML / XHTML: character data only, via xmltodict (tags and attributes dropped)
- HTML: Markdown via html2text
- JSON / YAML: scalar values joined by spaces (keys dropped)
- PDF: Markdown via PyMuPDF4LLM
- TXT / MD / RST / CSV: decoded as-is

Every failure (unreadable file, malformed markup, unsupported extension) is
raised as ExtractionError so the index builder can skip the document.
"""

import json
import logging
from html.entities import html5 as html5_entities
from pathlib import Path
from typing import Any, Iterator, List, Union
from xml.parsers import expat
from xml.parsers.expat import ExpatError

import html2text  # HTML to Markdown conversion
import pymupdf4llm  # PyMuPDF4LLM for LLM-optimized PDF processing
import xmltodict
import yaml

from .tfidf.errors import ExtractionError

logger = logging.getLogger(__name__)

XML_EXTENSIONS = frozenset({"xml", "xhtml"})
HTML_EXTENSIONS = frozenset({"html", "htm"})
PLAIN_EXTENSIONS = frozenset({"txt", "md", "markdown", "rst", "csv"})
SUPPORTED_EXTENSIONS = XML_EXTENSIONS | HTML_EXTENSIONS | PLAIN_EXTENSIONS | {"json", "yaml", "yml", "pdf"}


class _EntityAwareExpat:
    """
    expat module handed to xmltodict.parse().

    Documents with an external DTD (XHTML DOCTYPE) get their undeclared
    entity references skipped by expat. Parsers made here report a skipped
    entity as its HTML character (&nbsp; → U+00A0) or a space, so the text on
    either side stays two words.

    The text buffer is sized to the whole document: xmltodict joins every
    chunk it receives with cdata_separator, so a flush must never split a
    text run.
    """

    def __init__(self, buffer_size: int):
        self.buffer_size = max(buffer_size, 8192)

    def ParserCreate(self, *args, **kwargs):
        parser = expat.ParserCreate(*args, **kwargs)
        parser.buffer_size = self.buffer_size

        def skipped_entity(name, is_parameter_entity):
            if is_parameter_entity or parser.CharacterDataHandler is None:
                return
            parser.CharacterDataHandler(html5_entities.get(f"{name};", " "))

        parser.SkippedEntityHandler = skipped_entity
        return parser


def _normalize_file_type(file_type: str) -> str:
    file_ext = file_type.lower()
    if file_ext.startswith('.'):
        file_ext = file_ext[1:]
    return file_ext


def _collect_strings(node: Any, out: List[str], skip_attributes: bool = False) -> None:
    """Depth-first walk of parsed XML/JSON/YAML collecting scalar values"""
    if node is None:
        return
    if isinstance(node, dict):
        for key, value in node.items():
            if skip_attributes and isinstance(key, str) and key.startswith('@'):
                continue
            _collect_strings(value, out, skip_attributes)
    elif isinstance(node, list):
        for item in node:
            _collect_strings(item, out, skip_attributes)
    elif isinstance(node, bool):
        out.append("true" if node else "false")
    else:
        out.append(str(node))


class TextExtractor:
    """Extract plain text from documents on disk or in memory"""

    def __init__(self, html_fallback_for_xhtml: bool = True):
        """
        Args:
            html_fallback_for_xhtml: Convert .xhtml files that are not
                well-formed XML (undeclared entities etc.) with html2text
                instead of failing
        """
        self.html_fallback_for_xhtml = html_fallback_for_xhtml

    def _decode(self, content: bytes, document_id: str) -> str:
        try:
            return content.decode('utf-8')
        except UnicodeDecodeError:
            # Fallback to latin-1 (never fails)
            logger.warning(f"{document_id}: UTF-8 decode failed, using latin-1")
            return content.decode('latin-1', errors='replace')

    def extract_text_from_xml(self, content: bytes, document_id: str = "<bytes>") -> str:
        """
        Extract character data from an XML document.

        Text runs are separated by spaces at every element boundary, both
        between siblings and around inline children (<p>Use<code>x</code>to</p>),
        and skipped entity references never join the words around them.
        """
        try:
            data = xmltodict.parse(
                content,
                expat=_EntityAwareExpat(len(content)),
                attr_prefix='@',      # Attributes get @ prefix (skipped below)
                cdata_key='#text',    # Text content key
                cdata_separator=' ',  # Text split by child elements
                force_list=False
            )
        except ExpatError as e:
            raise ExtractionError(document_id, f"malformed XML: {e}") from e
        except ValueError as e:  # xmltodict refuses DTD entity declarations
            raise ExtractionError(document_id, f"unsupported XML: {e}") from e

        parts: List[str] = []
        _collect_strings(data, parts, skip_attributes=True)
        return " ".join(parts)

    def extract_text_from_html(self, content: bytes, document_id: str = "<bytes>") -> str:
        """Convert HTML to Markdown text"""
        html_string = content.decode('utf-8', errors='replace')

        converter = html2text.HTML2Text()
        converter.ignore_links = True
        converter.ignore_images = True
        converter.body_width = 0  # No line wrapping
        converter.ignore_emphasis = True

        return converter.handle(html_string)

    def extract_text_from_json(self, content: bytes, document_id: str = "<bytes>") -> str:
        """Join all scalar values of a JSON document"""
        try:
            data = json.loads(content.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ExtractionError(document_id, f"invalid JSON: {e}") from e

        parts: List[str] = []
        _collect_strings(data, parts)
        return " ".join(parts)

    def extract_text_from_yaml(self, content: bytes, document_id: str = "<bytes>") -> str:
        """Join all scalar values of a YAML document (all documents in a stream)"""
        try:
            documents = list(yaml.safe_load_all(content.decode('utf-8')))
        except (UnicodeDecodeError, yaml.YAMLError) as e:
            raise ExtractionError(document_id, f"invalid YAML: {str(e)[:300]}") from e

        parts: List[str] = []
        _collect_strings(documents, parts)
        return " ".join(parts)

    def extract_text_from_pdf(self, content: bytes, document_id: str = "<bytes>") -> str:
        """Extract PDF text as Markdown using PyMuPDF4LLM"""
        import pymupdf

        try:
            doc = pymupdf.open(stream=content, filetype="pdf")
        except Exception as e:  # pymupdf raises its own hierarchy plus RuntimeError
            raise ExtractionError(document_id, f"unreadable PDF: {e}") from e

        try:
            logger.debug(f"{document_id}: PDF has {len(doc)} pages, extracting text...")
            markdown_text = pymupdf4llm.to_markdown(doc)
        except Exception as e:
            raise ExtractionError(document_id, f"PDF text extraction failed: {e}") from e
        finally:
            doc.close()

        return markdown_text

    def extract_text(self, content: bytes, file_type: str, document_id: str = "<bytes>") -> str:
        """
        Extract text from file content based on type.

        Args:
            content: File content as bytes
            file_type: File extension (.xml, xml, .PDF, ...)
            document_id: Used in error messages

        Returns:
            Plain text for the tokenizer

        Raises:
            ExtractionError: Unsupported type or malformed content
        """
        file_ext = _normalize_file_type(file_type)

        if file_ext in XML_EXTENSIONS:
            try:
                return self.extract_text_from_xml(content, document_id)
            except ExtractionError:
                if file_ext == "xhtml" and self.html_fallback_for_xhtml:
                    logger.debug(f"{document_id}: not well-formed XML, converting as HTML")
                    return self.extract_text_from_html(content, document_id)
                raise
        if file_ext in HTML_EXTENSIONS:
            return self.extract_text_from_html(content, document_id)
        if file_ext == "json":
            return self.extract_text_from_json(content, document_id)
        if file_ext in {"yaml", "yml"}:
            return self.extract_text_from_yaml(content, document_id)
        if file_ext == "pdf":
            return self.extract_text_from_pdf(content, document_id)
        if file_ext in PLAIN_EXTENSIONS:
            return self._decode(content, document_id)

        raise ExtractionError(document_id, f"unsupported file type: {file_type!r}")

    def extract_file(self, path: Union[str, Path]) -> str:
        """
        Read a document from disk and extract its text.

        Raises:
            ExtractionError: If the file cannot be read or parsed
        """
        path = Path(path)
        document_id = path.as_posix()

        try:
            content = path.read_bytes()
        except OSError as e:
            raise ExtractionError(document_id, f"could not read file: {e}") from e

        return self.extract_text(content, path.suffix, document_id)


def discover_documents(root: Union[str, Path]) -> Iterator[str]:
    """
    List indexable documents under a directory.

    Args:
        root: Directory to scan (recursively)

    Yields:
        Document ids (POSIX paths prefixed with root as given), sorted,
        only for supported extensions
    """
    root = Path(root)
    for path in sorted(root.rglob('*')):
        if path.is_file() and _normalize_file_type(path.suffix) in SUPPORTED_EXTENSIONS:
            yield path.as_posix()
