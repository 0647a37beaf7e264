"""
Error taxonomy for nestshell.

Every failure the interpreter can report has an ErrorKind. Internally the
grammar, matcher and evaluator raise ShellError subclasses; the evaluator
converts them into Feedback data at its boundary so a host never has to
catch anything to keep accepting input.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification of interpreter failures."""
    INPUT_TOO_LONG = "input_too_long"
    UNBALANCED_PARENTHESES = "unbalanced_parentheses"
    EMPTY_COMMAND = "empty_command"
    UNEXPECTED_TOKEN = "unexpected_token"
    DEPTH_EXCEEDED = "depth_exceeded"
    REGISTRATION = "registration"
    DUPLICATE_REGISTRATION = "duplicate_registration"
    NO_MATCH = "no_match"
    HANDLER_FAILED = "handler_failed"


class ShellError(Exception):
    """Base class for all interpreter errors.

    Attributes:
        message: Human-readable description, returned to hosts verbatim.
        kind: The ErrorKind of this failure.
    """

    kind = ErrorKind.HANDLER_FAILED

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# === Parse errors ===

class ParseError(ShellError):
    """Structural error in a command line, with position context."""

    kind = ErrorKind.UNEXPECTED_TOKEN

    def __init__(self, message: str, position: int = None, command_snippet: str = None):
        self.position = position
        self.command_snippet = command_snippet

        full_message = message
        if position is not None:
            full_message += f" (at position {position})"
        if command_snippet:
            full_message += f"\n  Near: {command_snippet}"

        super().__init__(full_message)


class InputTooLong(ParseError):
    kind = ErrorKind.INPUT_TOO_LONG


class UnbalancedParentheses(ParseError):
    kind = ErrorKind.UNBALANCED_PARENTHESES


class EmptyCommand(ParseError):
    kind = ErrorKind.EMPTY_COMMAND


class UnexpectedToken(ParseError):
    kind = ErrorKind.UNEXPECTED_TOKEN


class DepthExceeded(ParseError):
    kind = ErrorKind.DEPTH_EXCEEDED


# === Registration errors ===

class RegistrationError(ShellError):
    """A command could not be registered. Fatal to that call only."""
    kind = ErrorKind.REGISTRATION


class DuplicateRegistration(RegistrationError):
    kind = ErrorKind.DUPLICATE_REGISTRATION

    def __init__(self, name: str, shape: str):
        self.name = name
        self.shape = shape
        shown = f"{name} {shape}".rstrip()
        super().__init__(f"Command already registered: {shown}")


# === Runtime errors ===

class NoMatch(ShellError):
    """No registered decider accepted the concrete arguments."""

    kind = ErrorKind.NO_MATCH

    def __init__(self, command: str, args_summary: str, reasons: Optional[list] = None,
                 help: Optional[list] = None):
        self.command = command
        self.args_summary = args_summary
        self.reasons = list(reasons or [])
        # Raw texts of help denials, for autocomplete
        self.help = list(help or [])
        if self.reasons:
            message = f"{command} ({args_summary}): " + "; ".join(self.reasons)
        else:
            message = f"Unrecognized command: {command}"
        super().__init__(message)


class HandlerFailed(ShellError):
    """A handler reported failure. The text is passed through as-is."""
    kind = ErrorKind.HANDLER_FAILED


class HelpRequested(Exception):
    """
    Usage help reached through autocomplete.

    Not a failure: the evaluator turns it into help feedback instead of an
    error, aborting the enclosing calls the same way.
    """

    def __init__(self, text: str):
        self.text = text
        super().__init__(text)
