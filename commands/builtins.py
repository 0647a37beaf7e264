r"""
Built-in commands, present in every evaluator's table.

    # a b c              → "a b c"   (inside parentheses, (#...) is captured
                                      by the tokenizer as opaque text)
    ? foo.*              → matching command names, one per line
    autocomplete lo      → completions for a command name or prefix
    autocomplete log 3   → the signature accepting "log 3", or its usage help
"""

import re
from typing import List

from commands.base import Accept, CommandEntry, CommandError, Deny, FunctionDecider
from commands.deciders import ANY_STRING, Predicate, Signature, any_string_function, as_decider
from commands.table import CommandTable
from errors import HelpRequested, NoMatch
from grammar.tokenizer import LITERAL_MARKER


QUERY_COMMAND = "?"
AUTOCOMPLETE_COMMAND = "autocomplete"

ANY_TEXT = FunctionDecider(lambda args: Accept(tuple(args)), "<text> ...")
REGEX = Predicate("<regex>", any_string_function)


def _invocation(args):
    if len(args) < 2:
        return Deny(f"Expected a command and its arguments but got: {' '.join(args) or 'nothing'}")
    return Accept(tuple(args))


INVOCATION = FunctionDecider(_invocation, "<command> <argument> ...")


def register_builtins(table: CommandTable) -> List[CommandEntry]:
    """
    Add the built-in commands to table.

    Shapes the table already holds are left alone, so a table can be
    shared between evaluators.

    Returns:
        The entries added
    """

    def literal(context, args):
        return " ".join(args)

    def list_all(context, args):
        return "\n".join(table.names())

    def query(context, args):
        pattern = args[0]
        try:
            return "\n".join(table.search(pattern))
        except re.error as e:
            raise CommandError(f"Regex could not be compiled: {e}") from e

    def complete_all(context, args):
        return ", ".join(table.names())

    def complete(context, args):
        prefix = args[0]
        completions = []
        for name in table.names():
            if name == prefix:
                completions.extend(table.signatures(name))
            elif name.startswith(prefix):
                completions.append(name)
        if not completions:
            return "No more handlers"
        return ", ".join(completions)

    def complete_invocation(context, args):
        try:
            entry, _ = table.match(args[0], args[1:])
        except NoMatch as e:
            if e.help:
                raise HelpRequested("\n".join(e.help)) from e
            raise
        return entry.signature

    added = []
    for name, decider, handler in [
        (LITERAL_MARKER, ANY_TEXT, literal),
        (QUERY_COMMAND, None, list_all),
        (QUERY_COMMAND, Signature(REGEX), query),
        (AUTOCOMPLETE_COMMAND, None, complete_all),
        (AUTOCOMPLETE_COMMAND, Signature(ANY_STRING), complete),
        (AUTOCOMPLETE_COMMAND, INVOCATION, complete_invocation),
    ]:
        shape = as_decider(decider).shape
        if any(entry.decider.shape == shape for entry in table.entries(name)):
            continue
        added.append(table.register(name, decider, handler))
    return added
