r"""
nestshell Tokenizer

Splits one logical command line into a flat token sequence:
- Word(text)
- Open  "("
- Close ")"
- LiteralMarker "#" directly after "(": the rest of that parenthesis
  is captured as one opaque Word, never tokenized further

A newline ends a statement only at parenthesis depth zero, so a call can
span several physical lines while a "(" is open:

    set level (
        get level
    )
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Union

from config import MAX_INPUT_LENGTH
from errors import InputTooLong, UnbalancedParentheses, UnexpectedToken


LITERAL_MARKER = "#"


# === Tokens ===

@dataclass(frozen=True)
class Word:
    """A whitespace-delimited word, or the opaque body of a literal region"""
    text: str
    position: int = 0

    def __repr__(self):
        return f'Word("{self.text}")'


@dataclass(frozen=True)
class Open:
    position: int = 0

    def __repr__(self):
        return 'Open'


@dataclass(frozen=True)
class Close:
    position: int = 0

    def __repr__(self):
        return 'Close'


@dataclass(frozen=True)
class LiteralMarker:
    position: int = 0

    def __repr__(self):
        return 'LiteralMarker'


Token = Union[Word, Open, Close, LiteralMarker]


# === Helpers ===

def get_snippet(text: Optional[str], position: int, context: int = 20) -> Optional[str]:
    """Get a snippet of text around a position for error messages"""
    if text is None:
        return None

    start = max(0, position - context)
    end = min(len(text), position + context)
    snippet = text[start:end]

    if start > 0:
        snippet = "..." + snippet
    if end < len(text):
        snippet = snippet + "..."

    return snippet


def check_balance(tokens: Sequence[Token], text: str = None) -> None:
    """
    Reject unbalanced parentheses in a token sequence.

    Raises:
        UnbalancedParentheses: At the first unmatched ")", or at the
            innermost "(" left open
    """
    unclosed = []
    for token in tokens:
        if isinstance(token, Open):
            unclosed.append(token.position)
        elif isinstance(token, Close):
            if not unclosed:
                raise UnbalancedParentheses(
                    "Right parenthesis encountered with no matching left parenthesis",
                    position=token.position,
                    command_snippet=get_snippet(text, token.position)
                )
            unclosed.pop()
    if unclosed:
        raise UnbalancedParentheses(
            "Dangling left parenthesis - missing closing parenthesis",
            position=unclosed[-1],
            command_snippet=get_snippet(text, unclosed[-1])
        )


# === Tokenizer ===

class Tokenizer:
    """
    Character scanner producing one token list per statement.

    The raw length check happens on construction, before any scanning.
    """

    def __init__(self, text: str, max_input_length: int = MAX_INPUT_LENGTH):
        self.text = text
        self.pos = 0
        self.length = len(text)

        if self.length > max_input_length:
            raise InputTooLong(
                f"Command too long ({self.length} characters). Maximum is {max_input_length}.",
                position=0,
                command_snippet=text[:50] + "..."
            )

    def peek(self, length: int = 1) -> str:
        """Look ahead without consuming"""
        return self.text[self.pos:self.pos + length]

    def skip_whitespace(self):
        """Skip whitespace characters, newlines included"""
        while self.pos < self.length and self.text[self.pos].isspace():
            self.pos += 1

    def get_snippet(self, position: int = None, context: int = 20) -> str:
        """Get a snippet of text around a position for error messages"""
        if position is None:
            position = self.pos
        return get_snippet(self.text, position, context)

    def at_end(self) -> bool:
        """True when only whitespace remains"""
        self.skip_whitespace()
        return self.pos >= self.length

    def next_statement(self) -> Optional[List[Token]]:
        """
        Tokenize the next statement.

        Returns:
            Token list, or None when the input is exhausted
        """
        tokens: List[Token] = []
        depth = 0
        word_start = None

        def flush():
            nonlocal word_start
            if word_start is not None:
                tokens.append(Word(self.text[word_start:self.pos], word_start))
                word_start = None

        while self.pos < self.length:
            char = self.text[self.pos]

            if char == '\n' and depth == 0:
                flush()
                self.pos += 1
                if tokens:
                    return tokens
                continue

            if char.isspace():
                flush()
                self.pos += 1
            elif char == '(':
                flush()
                if self.peek(2) == '(' + LITERAL_MARKER:
                    tokens.extend(self._literal_region())
                else:
                    tokens.append(Open(self.pos))
                    depth += 1
                    self.pos += 1
            elif char == ')':
                flush()
                tokens.append(Close(self.pos))
                # An unmatched ")" is reported by the tree builder
                depth = max(0, depth - 1)
                self.pos += 1
            else:
                if word_start is None:
                    word_start = self.pos
                self.pos += 1

        flush()
        return tokens or None

    def _literal_region(self) -> List[Token]:
        """Capture "(#...)" as Open, LiteralMarker, Word(raw), Close"""
        open_pos = self.pos
        self.pos += 2  # Skip (#
        start = self.pos

        depth = 1
        while self.pos < self.length:
            char = self.text[self.pos]
            if char == '(':
                depth += 1
            elif char == ')':
                depth -= 1
                if depth == 0:
                    break
            self.pos += 1

        if depth > 0:
            raise UnbalancedParentheses(
                "Unclosed literal string (#... - missing closing parenthesis",
                position=open_pos,
                command_snippet=self.get_snippet(open_pos)
            )

        raw = self.text[start:self.pos]
        close_pos = self.pos
        self.pos += 1  # Skip )

        return [Open(open_pos), LiteralMarker(open_pos + 1), Word(raw, start), Close(close_pos)]

    def statements(self) -> Iterator[List[Token]]:
        """Yield the token list of each statement in turn"""
        while True:
            tokens = self.next_statement()
            if tokens is None:
                return
            yield tokens


def tokenize(text: str, max_input_length: int = MAX_INPUT_LENGTH) -> List[Token]:
    """
    Tokenize exactly one statement.

    Raises:
        InputTooLong: Raw text longer than max_input_length
        UnbalancedParentheses: Unclosed literal region, or unbalanced
            parentheses anywhere in the text
        UnexpectedToken: More than one statement in balanced text

    Example:
        >>> tokenize("print (#a (b) c)")
        [Word("print"), Open, LiteralMarker, Word("a (b) c"), Close]
    """
    tokenizer = Tokenizer(text, max_input_length)
    tokens = tokenizer.next_statement() or []

    if not tokenizer.at_end():
        extra_pos = tokenizer.pos
        rest = [token for statement in tokenizer.statements() for token in statement]
        check_balance(tokens + rest, text)
        raise UnexpectedToken(
            "Unexpected input after end of statement (newline outside parentheses)",
            position=extra_pos,
            command_snippet=tokenizer.get_snippet(extra_pos)
        )

    return tokens
