"""
Tests for the nestshell tokenizer

Covers word splitting, parentheses, literal regions, statement framing
and the raw input length check.
"""

import pytest

from errors import ErrorKind, InputTooLong, UnbalancedParentheses, UnexpectedToken
from grammar.tokenizer import (
    Close, LiteralMarker, Open, Tokenizer, Word, check_balance, get_snippet, tokenize
)


# ============================================================
# Token Class Tests
# ============================================================

class TestTokenClasses:
    """Test the token data structures"""

    def test_word_repr(self):
        assert repr(Word("hello")) == 'Word("hello")'

    def test_structural_reprs(self):
        assert repr(Open()) == 'Open'
        assert repr(Close()) == 'Close'
        assert repr(LiteralMarker()) == 'LiteralMarker'

    def test_word_keeps_position(self):
        tokens = tokenize("ab  cd")
        assert [t.position for t in tokens] == [0, 4]


# ============================================================
# Tokenizer Utility Method Tests
# ============================================================

class TestTokenizerUtilities:
    """Test Tokenizer helper methods"""

    def test_peek(self):
        """peek doesn't advance"""
        tokenizer = Tokenizer("hello")
        assert tokenizer.peek() == 'h'
        assert tokenizer.peek(3) == 'hel'
        assert tokenizer.pos == 0

    def test_skip_whitespace(self):
        tokenizer = Tokenizer(" \t\n hello")
        tokenizer.skip_whitespace()
        assert tokenizer.pos == 4
        assert tokenizer.peek() == 'h'

    def test_snippet_is_elided(self):
        tokenizer = Tokenizer("x" * 100)
        snippet = tokenizer.get_snippet(50, context=5)
        assert snippet == "..." + "x" * 10 + "..."

    def test_snippet_helper(self):
        assert get_snippet("abc", 1) == "abc"
        assert get_snippet(None, 1) is None
        assert Tokenizer("a (b").get_snippet(2) == get_snippet("a (b", 2)

    def test_at_end_ignores_trailing_whitespace(self):
        tokenizer = Tokenizer("a  \n  ")
        tokenizer.next_statement()
        assert tokenizer.at_end()


# ============================================================
# Word Splitting Tests
# ============================================================

class TestWords:
    """Test whitespace-delimited words"""

    @pytest.mark.parametrize("text,expected", [
        ("print", ["print"]),
        ("print hello world", ["print", "hello", "world"]),
        ("  spaced   out  ", ["spaced", "out"]),
        ("tab\tseparated", ["tab", "separated"]),
        ("log level 3", ["log", "level", "3"]),
        ("sym-bols !@$ 1.5", ["sym-bols", "!@$", "1.5"]),
    ])
    def test_words(self, text, expected):
        tokens = tokenize(text)
        assert all(isinstance(t, Word) for t in tokens)
        assert [t.text for t in tokens] == expected

    def test_parentheses_split_words(self):
        """No whitespace needed around parentheses"""
        tokens = tokenize("a(b)c")
        assert repr(tokens) == '[Word("a"), Open, Word("b"), Close, Word("c")]'

    def test_empty_input(self):
        assert tokenize("") == []
        assert tokenize("   \n  ") == []


# ============================================================
# Parenthesis Tests
# ============================================================

class TestParentheses:
    """Test Open/Close emission"""

    def test_nested(self):
        tokens = tokenize("outer (inner x) y")
        assert repr(tokens) == (
            '[Word("outer"), Open, Word("inner"), Word("x"), Close, Word("y")]'
        )

    def test_unmatched_close_still_tokenized(self):
        """Balance errors are left to the tree builder"""
        tokens = tokenize("a b)")
        assert isinstance(tokens[-1], Close)

    def test_unmatched_open_still_tokenized(self):
        tokens = tokenize("a (b")
        assert isinstance(tokens[1], Open)


# ============================================================
# Literal Region Tests
# ============================================================

class TestLiteralRegions:
    """Test (#...) capture"""

    def test_literal_with_parentheses(self):
        """Parentheses inside a literal are not tokenized"""
        tokens = tokenize("print (#a (b) c)")
        assert repr(tokens) == '[Word("print"), Open, LiteralMarker, Word("a (b) c"), Close]'

    def test_literal_keeps_whitespace(self):
        tokens = tokenize("print (#  two  spaces )")
        assert tokens[3].text == "  two  spaces "

    def test_empty_literal(self):
        tokens = tokenize("print (#)")
        assert tokens[3].text == ""

    def test_literal_spans_newlines(self):
        tokens = tokenize("print (#line one\nline two)")
        assert tokens[3].text == "line one\nline two"

    def test_hash_inside_word_is_plain(self):
        """Only "(#" opens a literal region"""
        tokens = tokenize("tag a#b #c")
        assert [t.text for t in tokens] == ["tag", "a#b", "#c"]

    def test_unclosed_literal(self):
        with pytest.raises(UnbalancedParentheses) as excinfo:
            tokenize("print (#a (b) c")
        assert excinfo.value.kind == ErrorKind.UNBALANCED_PARENTHESES
        assert excinfo.value.position == 6


# ============================================================
# Statement Framing Tests
# ============================================================

class TestStatements:
    """Test newline handling"""

    def test_newline_inside_parentheses_continues(self):
        tokens = tokenize("set level (\n  get level\n)")
        assert [t.text for t in tokens if isinstance(t, Word)] == ["set", "level", "get", "level"]

    def test_second_statement_rejected(self):
        with pytest.raises(UnexpectedToken):
            tokenize("a\nb")

    def test_trailing_newline_allowed(self):
        tokens = tokenize("a b\n")
        assert [t.text for t in tokens] == ["a", "b"]

    def test_statements_generator(self):
        tokenizer = Tokenizer("a 1\n\nb (c\n d)\n")
        statements = list(tokenizer.statements())
        assert len(statements) == 2
        assert statements[0][0].text == "a"
        assert statements[1][0].text == "b"

    @pytest.mark.parametrize("text", [
        "a )\nb",
        "a\nb )",
        "a (\nb)) c\nd",
    ])
    def test_unbalanced_second_statement(self, text):
        """Imbalance wins over the extra statement"""
        with pytest.raises(UnbalancedParentheses) as excinfo:
            tokenize(text)
        assert excinfo.value.kind == ErrorKind.UNBALANCED_PARENTHESES

    def test_check_balance(self):
        check_balance([Open(0), Close(1)])
        with pytest.raises(UnbalancedParentheses) as excinfo:
            check_balance([Open(0), Close(1), Close(4)], "a() )")
        assert excinfo.value.position == 4
        with pytest.raises(UnbalancedParentheses) as excinfo:
            check_balance([Open(0), Open(3)])
        assert excinfo.value.position == 3


# ============================================================
# Length Limit Tests
# ============================================================

class TestInputLength:
    """Test the raw length check"""

    def test_at_limit(self):
        tokens = tokenize("x" * 10, max_input_length=10)
        assert len(tokens) == 1

    def test_over_limit(self):
        with pytest.raises(InputTooLong) as excinfo:
            tokenize("x" * 11, max_input_length=10)
        assert "Maximum is 10" in str(excinfo.value)

    def test_checked_before_scanning(self):
        """Too-long text fails even when it is structurally broken"""
        with pytest.raises(InputTooLong):
            Tokenizer(")" * 20, max_input_length=5)
