r"""
nestshell Call Tree Builder

Turns a token sequence into a tree of calls:
- CallNode(name, args)
- Literal(text)

    set level (get level) (#raw (text))
    → CallNode("set", [Literal("level"), CallNode("get", [Literal("level")]),
                       Literal("raw (text)")])

The evaluator interprets the tree.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from config import Limits, MAX_DEPTH
from errors import DepthExceeded, EmptyCommand, UnexpectedToken
from grammar.tokenizer import (
    LITERAL_MARKER, Close, LiteralMarker, Open, Token, Word, check_balance, get_snippet, tokenize
)


# === Tree Classes ===

def is_plain_word(text: str) -> bool:
    """True if text survives tokenization as a single bare word"""
    if not text:
        return False
    return not any(char.isspace() or char in '()' for char in text)


@dataclass(frozen=True)
class Literal:
    """Literal text argument"""
    text: str

    def to_text(self) -> str:
        if is_plain_word(self.text):
            return self.text
        return f"({LITERAL_MARKER}{self.text})"

    def __repr__(self):
        return f'Literal("{self.text}")'


@dataclass(frozen=True)
class CallNode:
    """Parsed call: name arg arg ..."""
    name: str
    args: Tuple['ArgumentNode', ...] = ()

    def to_text(self) -> str:
        """Serialize back to command text that parses to an equal tree"""
        parts = [self.name]
        for arg in self.args:
            if isinstance(arg, CallNode) and arg.name.startswith(LITERAL_MARKER):
                # "(#" would open a literal region
                parts.append(f"( {arg.to_text()})")
            elif isinstance(arg, CallNode):
                parts.append(f"({arg.to_text()})")
            else:
                parts.append(arg.to_text())
        return " ".join(parts)

    @property
    def depth(self) -> int:
        """Nesting depth of calls below this node (0 for a flat call)"""
        deepest = 0
        pending = [(self, 0)]
        while pending:
            node, level = pending.pop()
            deepest = max(deepest, level)
            for arg in node.args:
                if isinstance(arg, CallNode):
                    pending.append((arg, level + 1))
        return deepest

    def __repr__(self):
        return f'CallNode({self.name}, {list(self.args)})'


ArgumentNode = Union[Literal, CallNode]


# === Builder ===

class _Frame:
    """In-progress call on the builder stack"""

    __slots__ = ("name", "args", "position")

    def __init__(self, position: int):
        self.name: Optional[str] = None
        self.args: List[ArgumentNode] = []
        self.position = position

    def freeze(self) -> CallNode:
        return CallNode(self.name, tuple(self.args))


class TreeBuilder:
    """
    Builds a CallNode from tokens with an explicit stack.

    The stack holds one frame per open parenthesis scope plus the root, so
    len(stack) - 1 is the current nesting depth. Pushing past max_depth
    fails immediately.
    """

    def __init__(self, tokens: Sequence[Token], max_depth: int = MAX_DEPTH, text: str = None):
        self.tokens = tokens
        self.max_depth = max_depth
        self.text = text

    def get_snippet(self, position: int) -> Optional[str]:
        """Snippet of the source around position, if the source is known"""
        return get_snippet(self.text, position)

    def _literal(self, index: int) -> Literal:
        """Read Open LiteralMarker Word Close starting at index"""
        window = self.tokens[index:index + 4]
        if (len(window) == 4 and isinstance(window[2], Word)
                and isinstance(window[3], Close)):
            return Literal(window[2].text)
        position = self.tokens[index].position
        raise UnexpectedToken(
            "Malformed literal string, expected (#text)",
            position=position,
            command_snippet=self.get_snippet(position)
        )

    def build(self) -> CallNode:
        check_balance(self.tokens, self.text)

        stack = [_Frame(0)]
        expect_name = True
        index = 0
        count = len(self.tokens)

        while index < count:
            token = self.tokens[index]
            frame = stack[-1]

            if isinstance(token, Open):
                following = self.tokens[index + 1] if index + 1 < count else None
                if expect_name:
                    raise EmptyCommand(
                        "Expected a command name, found '('",
                        position=token.position,
                        command_snippet=self.get_snippet(token.position)
                    )
                if isinstance(following, LiteralMarker):
                    frame.args.append(self._literal(index))
                    index += 4
                    continue
                if len(stack) > self.max_depth:
                    raise DepthExceeded(
                        f"Command nesting too deep (depth {len(stack)}). Maximum is {self.max_depth}.",
                        position=token.position,
                        command_snippet=self.get_snippet(token.position)
                    )
                stack.append(_Frame(token.position))
                expect_name = True

            elif isinstance(token, Close):
                if expect_name:
                    raise EmptyCommand(
                        "Empty command '()'",
                        position=token.position,
                        command_snippet=self.get_snippet(token.position)
                    )
                done = stack.pop()
                stack[-1].args.append(done.freeze())

            elif isinstance(token, LiteralMarker):
                raise UnexpectedToken(
                    "Literal marker outside of (#...)",
                    position=token.position,
                    command_snippet=self.get_snippet(token.position)
                )

            elif isinstance(token, Word):
                if expect_name:
                    frame.name = token.text
                    expect_name = False
                else:
                    frame.args.append(Literal(token.text))

            else:
                raise UnexpectedToken(f"Unknown token {token!r}")

            index += 1

        if expect_name:
            raise EmptyCommand("Empty command, expected a command name", position=0)

        return stack[0].freeze()


def build(tokens: Sequence[Token], max_depth: int = MAX_DEPTH, text: str = None) -> CallNode:
    """Build the call tree of one statement's tokens"""
    return TreeBuilder(tokens, max_depth, text).build()


def parse(text: str, limits: Limits = None) -> CallNode:
    """
    Parse one command line.

    Args:
        text: Command text, one statement
        limits: Input length and depth limits (defaults if omitted)

    Returns:
        Root CallNode

    Example:
        >>> parse("outer (inner x) y")
        CallNode(outer, [CallNode(inner, [Literal("x")]), Literal("y")])
    """
    limits = limits or Limits()
    tokens = tokenize(text, limits.max_input_length)
    return build(tokens, limits.max_depth, text)


# === Test ===

if __name__ == '__main__':
    tests = [
        "print hello world",
        "outer (inner x) y",
        "print (#a (b) c)",
        "set level (\n  get level\n)",
        "broken (call",
    ]

    for test in tests:
        print(f"\nInput: {test}")
        try:
            result = parse(test)
            print(f"Output: {result}")
        except Exception as e:
            print(f"Error: {e}")
