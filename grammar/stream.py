"""
Incremental statement detection for streamed input.

Characters arrive one at a time (from a socket or a pipe). PartialParse
tracks parenthesis depth and reports when the accumulated characters form a
complete statement. Nothing is tokenized here; complete statements are
handed to the evaluator.
"""

from enum import Enum


class ParseOp(Enum):
    """State after feeding one character"""
    READY = "ready"          # Accumulated characters form a statement
    UNREADY = "unready"      # Keep accumulating
    DISCARD = "discard"      # Drop everything accumulated so far


class PartialParse:
    """
    One-character-at-a-time statement splitter.

    READY on a newline at depth zero. An unmatched ")" poisons the
    statement: every character until the next depth-zero newline is
    DISCARD, and that newline resets the state.
    """

    def __init__(self):
        self.depth = 0
        self.poisoned = False

    def feed(self, char: str) -> ParseOp:
        if char == '\n' and self.depth == 0:
            self.poisoned = False
            return ParseOp.READY
        if char == '(':
            self.depth += 1
        elif char == ')':
            if self.depth == 0:
                self.poisoned = True
                return ParseOp.DISCARD
            self.depth -= 1
        return ParseOp.DISCARD if self.poisoned else ParseOp.UNREADY

