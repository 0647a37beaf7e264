"""
Pre-built argument predicates and the Signature decider.

A Predicate consumes tokens from the front of the argument list and
produces coerced values. A Signature chains keyword literals and
predicates into a decider that accepts only when every part accepts and
every argument is consumed:

    Signature("level", ANY_U8)        # log level 3  → (3,)
    Signature(ANY_ATOM, ANY_STRING)   # set key (#some value) → ("key", "some value")

Writing a custom predicate:

    def above_123(tokens):
        require(tokens, 1)
        number = parse_int(tokens[0], -2**31, 2**31 - 1)
        if number <= 123:
            raise Denied("Number is not >123")
        return 1, [number]

    I32_ABOVE_123 = Predicate("<i32-over-123>", above_123)
"""

import base64
import binascii
import re
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from commands.base import Accept, Decider, Decision, Deny, FunctionDecider


INTEGER_PATTERN = re.compile(r'[+-]?[0-9]+')
UNSIGNED_PATTERN = re.compile(r'\+?[0-9]+')

I32_MIN, I32_MAX = -2**31, 2**31 - 1
U8_MAX = 2**8 - 1
USIZE_MAX = 2**64 - 1


class Denied(Exception):
    """Raised by a predicate function to reject its input"""

    def __init__(self, reason: str, help: bool = False):
        self.reason = reason
        self.help = help
        super().__init__(reason)


class Predicate:
    """
    Named token consumer.

    function(tokens) returns (consumed_count, values) or raises Denied.
    """

    def __init__(self, description: str, function: Callable[[Sequence[str]], Tuple[int, List[Any]]]):
        self.description = description
        self.function = function

    def consume(self, tokens: Sequence[str]) -> Tuple[int, List[Any]]:
        return self.function(tokens)

    def __repr__(self):
        return f'Predicate("{self.description}")'


Part = Union[str, Predicate]


class Signature(Decider):
    """
    Decider built from keyword literals and predicates.

    Keyword literals must match exactly and produce no values.
    """

    def __init__(self, *parts: Part):
        for part in parts:
            if not isinstance(part, (str, Predicate)):
                raise TypeError(f"Signature parts must be keywords or predicates, got {part!r}")
        self.parts = parts
        self.description = " ".join(
            part if isinstance(part, str) else part.description
            for part in parts
        )

    def decide(self, args: Sequence[str]) -> Decision:
        values: List[Any] = []
        index = 0

        for part in self.parts:
            remaining = args[index:]

            if isinstance(part, str):
                if not remaining or remaining[0] != part:
                    got = remaining[0] if remaining else "nothing"
                    return Deny(f"Expected {part} but got: {got}")
                index += 1
                continue

            try:
                consumed, produced = part.consume(remaining)
            except Denied as e:
                if e.help:
                    return Deny(e.reason, help=True)
                return Deny(f"Expected {part.description} but got: {e.reason}")

            if consumed > len(remaining):
                return Deny("Decider advanced too far")
            values.extend(produced)
            index += consumed

        if index < len(args):
            extra = " ".join(args[index:])
            if self.parts:
                return Deny(f"Unexpected arguments after {self.description}: {extra}")
            return Deny(f"Expected no arguments but got: {extra}")

        return Accept(tuple(values))


def as_decider(decider: Optional[Union[Decider, Predicate, Sequence[Part], Callable]]) -> Decider:
    """
    Normalize the decider argument of a registration.

    None means "no arguments"; a predicate or a sequence of parts becomes a
    Signature; a plain function becomes a FunctionDecider.
    """
    if decider is None:
        return Signature()
    if isinstance(decider, Decider):
        return decider
    if isinstance(decider, Predicate):
        return Signature(decider)
    if isinstance(decider, (tuple, list)):
        return Signature(*decider)
    if callable(decider):
        return FunctionDecider(decider)
    raise TypeError(f"Cannot use {decider!r} as a decider")


# === Helpers ===

def require(tokens: Sequence[str], count: int) -> None:
    """Deny unless at least count tokens are present"""
    if len(tokens) < count:
        raise Denied(
            f"Too few elements: {list(tokens)!r}, length: {len(tokens)}, expected: {count}"
        )


def parse_int(token: str, minimum: int, maximum: int, unsigned: bool = False) -> int:
    pattern = UNSIGNED_PATTERN if unsigned else INTEGER_PATTERN
    if not pattern.fullmatch(token):
        raise Denied(token)
    number = int(token)
    if not minimum <= number <= maximum:
        raise Denied(f"{token} (out of range)")
    return number


def parse_float(token: str) -> float:
    # float() would strip surrounding whitespace
    if token != token.strip():
        raise Denied(token)
    try:
        return float(token)
    except ValueError:
        raise Denied(token) from None


# === Predicate functions ===
# Please keep this list sorted

def any_atom_function(tokens):
    require(tokens, 1)
    if any(char.isspace() for char in tokens[0]) or not tokens[0]:
        raise Denied(tokens[0])
    return 1, [tokens[0]]


def any_base64_function(tokens):
    require(tokens, 1)
    try:
        return 1, [base64.b64decode(tokens[0], validate=True)]
    except (binascii.Error, ValueError) as e:
        raise Denied(str(e)) from None


def any_bool_function(tokens):
    require(tokens, 1)
    if tokens[0] == "true":
        return 1, [True]
    if tokens[0] == "false":
        return 1, [False]
    raise Denied(tokens[0])


def any_f32_function(tokens):
    require(tokens, 1)
    return 1, [parse_float(tokens[0])]


def any_i32_function(tokens):
    require(tokens, 1)
    return 1, [parse_int(tokens[0], I32_MIN, I32_MAX)]


def any_string_function(tokens):
    require(tokens, 1)
    return 1, [tokens[0]]


def any_u8_function(tokens):
    require(tokens, 1)
    return 1, [parse_int(tokens[0], 0, U8_MAX, unsigned=True)]


def any_usize_function(tokens):
    require(tokens, 1)
    return 1, [parse_int(tokens[0], 0, USIZE_MAX, unsigned=True)]


def ignore_all_function(tokens):
    return len(tokens), []


def many_i32_function(tokens):
    numbers = []
    for token in tokens:
        if not INTEGER_PATTERN.fullmatch(token):
            break
        numbers.append(parse_int(token, I32_MIN, I32_MAX))
    if not numbers:
        require(tokens, 1)
        raise Denied(tokens[0])
    return len(numbers), numbers


def many_string_function(tokens):
    require(tokens, 1)
    return len(tokens), list(tokens)


def positive_f32_function(tokens):
    require(tokens, 1)
    number = parse_float(tokens[0])
    if not number >= 0.0:
        raise Denied(tokens[0])
    return 1, [number]


def two_string_function(tokens):
    if len(tokens) == 1:
        raise Denied("expected 1 more string")
    require(tokens, 2)
    return 2, [tokens[0], tokens[1]]


# === Predicates ===

ANY_ATOM = Predicate("<atom>", any_atom_function)
ANY_BASE64 = Predicate("<base64>", any_base64_function)
ANY_BOOL = Predicate("<true/false>", any_bool_function)
ANY_F32 = Predicate("<f32>", any_f32_function)
ANY_I32 = Predicate("<i32>", any_i32_function)
ANY_STRING = Predicate("<string>", any_string_function)
ANY_U8 = Predicate("<u8>", any_u8_function)
ANY_USIZE = Predicate("<usize>", any_usize_function)
IGNORE_ALL = Predicate("<anything> ...", ignore_all_function)
MANY_I32 = Predicate("<i32> ...", many_i32_function)
MANY_STRING = Predicate("<string> ...", many_string_function)
POSITIVE_F32 = Predicate("<f32>=0>", positive_f32_function)
TWO_STRINGS = Predicate("<string> <string>", two_string_function)
