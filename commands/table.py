"""
Command table - maps command names to candidate handlers.

Each name holds one or more entries in registration order. Resolution runs
each entry's decider over the concrete arguments and the first acceptance
wins. Registration happens at host setup; the table is only read while a
line is evaluated.
"""

import re
from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple

import structlog

from commands.base import Accept, CommandEntry, Deny, Handler, as_handler
from commands.deciders import as_decider
from errors import DuplicateRegistration, NoMatch, RegistrationError

logger = structlog.get_logger("nestshell.commands")

# Names must survive tokenization as a single word
VALID_NAME_PATTERN = re.compile(r'[^\s()]+')


def summarize_args(args: Sequence[str]) -> str:
    """Short description of an argument list for diagnostics"""
    count = len(args)
    noun = "argument" if count == 1 else "arguments"
    return f"{count} {noun}"


class CommandTable:
    """
    Registry of command entries keyed by name.

    Usage:
        table = CommandTable()
        table.register("add", MANY_I32, lambda ctx, args: str(sum(args)))
        handler, values = table.resolve("add", ["1", "2"])
        handler.invoke(ctx, values)  # "3"
    """

    def __init__(self):
        self._entries: Dict[str, List[CommandEntry]] = {}

    def register(self, name: str, decider=None, handler: Callable = None) -> CommandEntry:
        """
        Register a handler for a command shape.

        Args:
            name: Command name (no whitespace or parentheses)
            decider: Decider, Predicate, sequence of parts, function, or
                None for a command taking no arguments
            handler: Handler or function(context, args)

        Returns:
            The new entry

        Raises:
            RegistrationError: Invalid name, decider or handler
            DuplicateRegistration: name already has a decider of this shape
        """
        if not isinstance(name, str) or not VALID_NAME_PATTERN.fullmatch(name):
            raise RegistrationError(
                f"Invalid command name {name!r}. Names must be non-empty and "
                f"contain no whitespace or parentheses."
            )
        if handler is None:
            raise RegistrationError(f"No handler given for command '{name}'")

        try:
            decider = as_decider(decider)
            handler = as_handler(handler)
        except TypeError as e:
            raise RegistrationError(f"Cannot register '{name}': {e}") from e

        candidates = self._entries.get(name, [])
        for existing in candidates:
            if existing.decider.shape == decider.shape:
                raise DuplicateRegistration(name, decider.shape)

        entry = CommandEntry(name=name, decider=decider, handler=handler)
        self._entries.setdefault(name, []).append(entry)
        logger.debug("command_registered", command=name, shape=decider.shape)
        return entry

    def register_many(self, specs: Iterable[Tuple[str, Any, Callable]]) -> List[CommandEntry]:
        """
        Register (name, decider, handler) triples in order.

        Stops at the first failing registration; earlier ones stay.
        """
        return [self.register(name, decider, handler) for name, decider, handler in specs]

    def resolve(self, name: str, args: Sequence[str]) -> Tuple[Handler, Tuple[Any, ...]]:
        """
        Find the handler for a concrete invocation.

        Args:
            name: Command name
            args: Evaluated argument texts

        Returns:
            (handler, coerced argument values)

        Raises:
            NoMatch: Unknown name, or every decider denied the arguments
        """
        entry, values = self.match(name, args)
        return entry.handler, values

    def match(self, name: str, args: Sequence[str]) -> Tuple[CommandEntry, Tuple[Any, ...]]:
        """
        Find the entry accepting a concrete invocation.

        A decider that raises, or returns something other than Accept or
        Deny, counts as a denial.

        Returns:
            (entry, coerced argument values)

        Raises:
            NoMatch: Unknown name, or every decider denied the arguments.
                Help denials are also kept in NoMatch.help.
        """
        candidates = self._entries.get(name)
        if not candidates:
            raise NoMatch(name, summarize_args(args))

        reasons = []
        help_texts = []
        for entry in candidates:
            description = entry.decider.description or "no arguments"
            try:
                decision = entry.decider.decide(list(args))
            except Exception as e:
                logger.warning("decider_failed", command=name, shape=entry.decider.shape,
                               error=f"{type(e).__name__}: {e}")
                reasons.append(f"Expected {description} but got: {e}")
                continue

            if isinstance(decision, Accept):
                return entry, tuple(decision.values)

            if not isinstance(decision, Deny):
                logger.warning("decider_failed", command=name, shape=entry.decider.shape,
                               error=f"returned {decision!r}")
                reasons.append(f"Expected {description} but the decider returned {decision!r}")
                continue

            if decision.help:
                help_texts.append(decision.reason)
                reasons.append(f"Expected {description} but got denied: {decision.reason}")
            else:
                reasons.append(decision.reason)

        raise NoMatch(name, summarize_args(args), reasons, help_texts)

    def search(self, pattern: str) -> List[str]:
        """
        Names matching a regular expression, sorted.

        Raises:
            re.error: If the pattern does not compile
        """
        regex = re.compile(pattern)
        return sorted(name for name in self._entries if regex.search(name))

    def names(self) -> List[str]:
        return sorted(self._entries)

    def entries(self, name: str) -> Tuple[CommandEntry, ...]:
        """Candidate entries for name, in registration order"""
        return tuple(self._entries.get(name, ()))

    def signatures(self, name: str) -> List[str]:
        return [entry.signature for entry in self.entries(name)]

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return sum(len(candidates) for candidates in self._entries.values())
