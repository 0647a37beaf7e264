"""
evaluator.py - The execution engine

Takes command lines, parses them, evaluates the call tree innermost-first.

    outer (inner x) y
    1. inner x  → "r"
    2. outer r y

A failing call aborts its whole ancestor chain: later siblings and the
enclosing calls are never invoked, and the original failure text is
returned unchanged.
"""

from typing import Any, Iterable, List, Optional, Tuple

import structlog

from commands.base import CommandEntry, CommandError
from commands.builtins import register_builtins
from commands.table import CommandTable
from config import Limits
from errors import DepthExceeded, HandlerFailed, HelpRequested, ParseError, ShellError
from feedback import Feedback
from grammar.parser import CallNode, Literal, build, parse
from grammar.tokenizer import Tokenizer

logger = structlog.get_logger("nestshell.evaluator")


class Evaluator:
    """
    The execution engine.

    Parse → Resolve → Invoke → Feedback

    The execution context belongs to the host and is passed through to
    every handler untouched.
    """

    def __init__(self, limits: Limits = None, table: CommandTable = None):
        """
        Create an evaluator with the built-in commands registered.

        Args:
            limits: Input length and nesting limits (defaults if omitted)
            table: Existing command table to evaluate against; built-ins
                missing from it are added
        """
        self.limits = limits or Limits()
        self.table = table if table is not None else CommandTable()
        # Remaining depth budget while a handler runs, for re-entrant calls
        self._remaining: Optional[int] = None
        register_builtins(self.table)

    # ===== Registration =====

    def register(self, name: str, decider=None, handler=None) -> CommandEntry:
        """Register a handler, see CommandTable.register"""
        return self.table.register(name, decider, handler)

    def register_many(self, specs: Iterable[Tuple[str, Any, Any]]) -> List[CommandEntry]:
        return self.table.register_many(specs)

    # ===== Evaluation =====

    def parse(self, line: str) -> CallNode:
        return parse(line, self.limits)

    def evaluate(self, line: str, context: Any = None) -> Feedback:
        """
        Evaluate one command line.

        Args:
            line: Command text (one statement, may span lines inside parentheses)
            context: Host execution context passed to handlers

        Returns:
            Feedback with the root call's output or the first failure
        """
        try:
            tree = self.parse(line)
        except ParseError as e:
            logger.debug("parse_failed", kind=e.kind.value, error=e.message)
            return Feedback.from_error(e)

        return self.evaluate_tree(tree, context)

    def evaluate_many(self, text: str, context: Any = None) -> Feedback:
        """
        Evaluate a script statement by statement.

        Every statement is parsed before any runs, so a parse error anywhere
        runs nothing. Evaluation stops at the first statement that does not
        succeed and returns its feedback, otherwise the last statement's.
        """
        try:
            tokenizer = Tokenizer(text, self.limits.max_input_length)
            trees = [build(tokens, self.limits.max_depth, text) for tokens in tokenizer.statements()]
        except ParseError as e:
            logger.debug("parse_failed", kind=e.kind.value, error=e.message)
            return Feedback.from_error(e)

        result = Feedback.ok()
        for tree in trees:
            result = self.evaluate_tree(tree, context)
            if not result.is_ok:
                return result
        return result

    def evaluate_tree(self, tree: CallNode, context: Any = None) -> Feedback:
        """Evaluate an already built call tree"""
        if self._remaining is None:
            budget = self.limits.max_depth
        else:
            budget = self._remaining - 1

        try:
            if budget < 0 or tree.depth > budget:
                raise DepthExceeded(
                    f"Command nesting too deep for remaining depth {max(budget, 0)}"
                )
            return Feedback.ok(self._evaluate(tree, context, budget))
        except HelpRequested as e:
            return Feedback.help(e.text)
        except ShellError as e:
            return Feedback.from_error(e)

    def _evaluate(self, node: CallNode, context: Any, remaining: int) -> str:
        """Evaluate arguments left to right, then invoke the node itself"""
        if remaining < 0:
            raise DepthExceeded(f"Command nesting too deep at '{node.name}'")

        args = []
        for arg in node.args:
            if isinstance(arg, Literal):
                args.append(arg.text)
            else:
                args.append(self._evaluate(arg, context, remaining - 1))

        handler, values = self.table.resolve(node.name, args)
        return self._invoke(node.name, handler, context, values, remaining)

    def _invoke(self, name: str, handler, context: Any, values: tuple, remaining: int) -> str:
        logger.debug("command_invoked", command=name, argc=len(values))

        previous = self._remaining
        self._remaining = remaining
        try:
            return handler.invoke(context, values)
        except CommandError as e:
            logger.debug("command_failed", command=name, error=e.message)
            raise HandlerFailed(e.message) from e
        except (ShellError, HelpRequested):
            raise
        except Exception as e:
            logger.exception("handler_crashed", command=name)
            raise HandlerFailed(f"{type(e).__name__}: {e}") from e
        finally:
            self._remaining = previous
