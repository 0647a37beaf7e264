"""
Feedback - the result of evaluating one command line.

Success text, failure text, or help text from a decider. Failures carry the
ErrorKind that produced them so hosts can render diagnostics.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from errors import ErrorKind, ShellError


class FeedbackKind(str, Enum):
    OK = "ok"
    ERR = "err"
    HELP = "help"


@dataclass(frozen=True)
class Feedback:
    """Result of an evaluation, returned as data."""
    kind: FeedbackKind
    text: str = ""
    error: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, text: str = "") -> 'Feedback':
        return cls(FeedbackKind.OK, text)

    @classmethod
    def err(cls, kind: ErrorKind, text: str) -> 'Feedback':
        return cls(FeedbackKind.ERR, text, kind)

    @classmethod
    def help(cls, text: str) -> 'Feedback':
        return cls(FeedbackKind.HELP, text)

    @classmethod
    def from_error(cls, error: ShellError) -> 'Feedback':
        return cls.err(error.kind, error.message)

    @property
    def is_ok(self) -> bool:
        return self.kind == FeedbackKind.OK

    @property
    def is_err(self) -> bool:
        return self.kind == FeedbackKind.ERR

    def render(self) -> str:
        """
        Render for a text transport.

        Empty success renders as "Ok", failures as "Err: <text>".
        """
        if self.kind == FeedbackKind.OK:
            return self.text if self.text else "Ok"
        if self.kind == FeedbackKind.ERR:
            return f"Err: {self.text}"
        return self.text if self.text else "Empty help message"

    def __repr__(self):
        if self.error is not None:
            return f'Feedback.err({self.error.value}, "{self.text}")'
        return f'Feedback.{self.kind.value}("{self.text}")'
