"""
Unit tests for the TF-IDF lexer.
"""

import pytest
from docseek.tfidf.tokenizer import Lexer, TokenKind, iter_tokens, normalize, tokenize


SAMPLES = [
    "glBindTexture(GL_TEXTURE_2D, 0);",
    "  leading and trailing whitespace \n\t",
    "Version 4.5 of the API, released 2014",
    "tabs\tand\nnewlines\r\nmixed",
    "ünïcödé wörds and ½ fractions",
    "x86_64 and 64bit",
    "",
    "   ",
]


class TestLexerRules:
    """Test the three tokenization rules"""

    def test_numeric_run(self):
        """Decimal digit runs become one numeric token"""
        tokens = list(iter_tokens("12345"))
        assert tokens == [(TokenKind.NUMERIC, 0, 5)]

    def test_word_run_includes_digits(self):
        """A word starts with a letter and continues over letters and digits"""
        assert list(Lexer("glVertex3f").spans()) == ["glVertex3f"]

    def test_digits_then_letters_split(self):
        """A numeric run stops at the first letter"""
        assert list(Lexer("64bit").spans()) == ["64", "bit"]
        kinds = [token.kind for token in Lexer("64bit")]
        assert kinds == [TokenKind.NUMERIC, TokenKind.WORD]

    def test_symbols_are_single_characters(self):
        """Punctuation is emitted one character at a time"""
        assert list(Lexer("(),;").spans()) == ["(", ")", ",", ";"]
        assert list(Lexer("==").spans()) == ["=", "="]

    def test_underscore_is_a_symbol(self):
        """Underscore is not alphanumeric, so it splits identifiers"""
        assert list(Lexer("GL_TEXTURE_2D").spans()) == ["GL", "_", "TEXTURE", "_", "2", "D"]

    def test_unicode_letters(self):
        """Non-ASCII letters are alphabetic"""
        assert list(Lexer("Größe ünïcödé").spans()) == ["Größe", "ünïcödé"]

    def test_whitespace_only(self):
        """Whitespace never produces tokens"""
        assert list(iter_tokens(" \t\n\r ")) == []
        assert list(iter_tokens("")) == []


class TestLexerSequence:
    """Test laziness and restartability"""

    def test_iter_tokens_is_lazy(self):
        """Tokens are produced on demand"""
        tokens = iter_tokens("one two three")
        first = next(tokens)
        assert (first.start, first.end) == (0, 3)

    def test_lexer_is_restartable(self):
        """Iterating a Lexer twice yields the same tokens"""
        lexer = Lexer("bind the texture, then draw")
        assert list(lexer) == list(lexer)

    def test_tokens_are_offsets(self):
        """Tokens reference the source text by offset"""
        text = "bind texture"
        tokens = list(Lexer(text))
        assert [text[t.start:t.end] for t in tokens] == ["bind", "texture"]


class TestLexerProperties:
    """Properties that must hold for any input"""

    @pytest.mark.parametrize("text", SAMPLES)
    def test_whitespace_reinsertion_reproduces_input(self, text):
        """Tokens plus the whitespace between them rebuild the stripped input"""
        tokens = list(Lexer(text))
        if not tokens:
            assert text.strip() == ""
            return

        rebuilt = []
        for previous, token in zip([None] + tokens[:-1], tokens):
            if previous is not None:
                gap = text[previous.end:token.start]
                assert gap.isspace() or gap == ""
                rebuilt.append(gap)
            rebuilt.append(text[token.start:token.end])

        assert "".join(rebuilt) == text[tokens[0].start:tokens[-1].end]
        assert text[:tokens[0].start].strip() == ""
        assert text[tokens[-1].end:].strip() == ""

    @pytest.mark.parametrize("text", SAMPLES)
    def test_no_embedded_whitespace(self, text):
        """No token contains whitespace"""
        for span in Lexer(text).spans():
            assert span
            assert not any(ch.isspace() for ch in span)

    @pytest.mark.parametrize("text", SAMPLES)
    def test_runs_are_maximal(self, text):
        """The character after a run could not have extended it"""
        for token in Lexer(text):
            if token.end >= len(text):
                continue
            following = text[token.end]
            if token.kind is TokenKind.NUMERIC:
                assert not following.isdecimal()
            elif token.kind is TokenKind.WORD:
                assert not following.isalnum()
            else:
                assert token.end - token.start == 1


class TestNormalization:
    """Test term normalization"""

    def test_words_are_upper_cased(self):
        """Word tokens are case-folded to upper case"""
        assert tokenize("Texture texture TEXTURE") == ["TEXTURE"] * 3

    def test_numbers_and_symbols_verbatim(self):
        """Numeric and symbol tokens are not changed"""
        assert tokenize("42 + 7") == ["42", "+", "7"]
        assert normalize("+", TokenKind.SYMBOL) == "+"

    def test_mixed_content(self):
        """Realistic reference-page text"""
        assert tokenize("glBindTexture(GL_TEXTURE_2D, 0);") == [
            "GLBINDTEXTURE", "(", "GL", "_", "TEXTURE", "_", "2", "D", ",", "0", ")", ";",
        ]

    def test_empty_string(self):
        """Empty and whitespace-only text yields no terms"""
        assert tokenize("") == []
        assert tokenize("   ") == []
        assert tokenize("\n\t") == []
