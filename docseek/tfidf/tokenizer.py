"""
Lexer for TF-IDF text processing.

Tokenization rules (applied left to right after skipping whitespace):
1. Decimal digit → maximal run of decimal digits (numeric token)
2. Alphabetic character → maximal run of alphanumeric characters (word token)
3. Anything else → exactly one character (symbol token)

Tokens are (kind, start, end) offsets into the source text, so the lexer never
copies substrings until a term is actually needed.

Normalization:
- Word tokens are upper-cased ("Texture" → "TEXTURE")
- Numeric and symbol tokens are used verbatim
"""

from enum import Enum
from typing import Iterator, List, NamedTuple


class TokenKind(Enum):
    """Token classes produced by the lexer"""
    NUMERIC = "numeric"
    WORD = "word"
    SYMBOL = "symbol"


class Token(NamedTuple):
    """Half-open span [start, end) of one token inside its source text"""
    kind: TokenKind
    start: int
    end: int


def iter_tokens(text: str) -> Iterator[Token]:
    """
    Lazily yield tokens from text.

    Args:
        text: Source text (never modified or copied)

    Yields:
        Token spans in left-to-right order

    Examples:
        >>> text = "glVertex3f(1.0)"
        >>> [text[t.start:t.end] for t in iter_tokens(text)]
        ['glVertex3f', '(', '1', '.', '0', ')']
    """
    n = len(text)
    pos = 0

    while True:
        while pos < n and text[pos].isspace():
            pos += 1

        if pos >= n:
            return

        start = pos
        ch = text[pos]

        if ch.isdecimal():
            while pos < n and text[pos].isdecimal():
                pos += 1
            yield Token(TokenKind.NUMERIC, start, pos)
        elif ch.isalpha():
            while pos < n and text[pos].isalnum():
                pos += 1
            yield Token(TokenKind.WORD, start, pos)
        else:
            pos += 1
            yield Token(TokenKind.SYMBOL, start, pos)


class Lexer:
    """
    Restartable token sequence over an owned text buffer.

    Every call to iter() starts a fresh pass from the beginning, so the same
    Lexer can be consumed more than once (e.g. counting then listing).
    """

    def __init__(self, text: str):
        self.text = text

    def __iter__(self) -> Iterator[Token]:
        return iter_tokens(self.text)

    def spans(self) -> Iterator[str]:
        """Raw (un-normalized) token text"""
        for token in self:
            yield self.text[token.start:token.end]

    def terms(self) -> Iterator[str]:
        """Normalized terms, ready to be used as index keys"""
        for token in self:
            yield normalize(self.text[token.start:token.end], token.kind)


def normalize(raw: str, kind: TokenKind) -> str:
    """
    Map raw token text to its index term.

    Args:
        raw: Token text as it appears in the source
        kind: Token class

    Returns:
        Upper-cased text for word tokens, raw text otherwise
    """
    if kind is TokenKind.WORD:
        return raw.upper()
    return raw


def tokenize(text: str) -> List[str]:
    """
    Tokenize text into normalized terms.

    Args:
        text: Input text (document body or query)

    Returns:
        List of terms in source order (duplicates preserved)

    Examples:
        >>> tokenize("glBindTexture binds a texture")
        ['GLBINDTEXTURE', 'BINDS', 'A', 'TEXTURE']

        >>> tokenize("GL_TEXTURE_2D, 42")
        ['GL', '_', 'TEXTURE', '_', '2', 'D', ',', '42']

        >>> tokenize("   ")
        []
    """
    if not text:
        return []

    return list(Lexer(text).terms())
