"""
Base decider and handler interfaces.

A command registration pairs a Decider (which inspects the concrete,
already-evaluated arguments and accepts or rejects them) with a Handler
(the host callback run on acceptance).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Sequence, Tuple, Union


class CommandError(Exception):
    """
    Raised by a handler to report failure.

    The message is returned to the caller verbatim.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# === Decisions ===

@dataclass(frozen=True)
class Accept:
    """Decider accepted; values are the coerced arguments for the handler"""
    values: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class Deny:
    """Decider rejected; help marks a reason meant as usage help"""
    reason: str
    help: bool = False


Decision = Union[Accept, Deny]


# === Deciders ===

class Decider(ABC):
    """
    Validates and coerces the arguments of one command shape.

    The description doubles as the shape used to detect duplicate
    registrations, so two deciders with the same description are the
    same shape.
    """

    description: str = ""

    @abstractmethod
    def decide(self, args: Sequence[str]) -> Decision:
        """
        Accept or reject concrete arguments.

        Args:
            args: Evaluated argument texts, in order

        Returns:
            Accept with coerced values, or Deny with a reason
        """
        raise NotImplementedError

    @property
    def shape(self) -> str:
        return self.description

    def __repr__(self):
        return f'{type(self).__name__}("{self.description}")'


class FunctionDecider(Decider):
    """Decider backed by a plain function returning a Decision"""

    def __init__(self, function: Callable[[Sequence[str]], Decision], description: str = None):
        self.function = function
        self.description = description if description is not None else f"<{function.__name__}>"

    def decide(self, args: Sequence[str]) -> Decision:
        return self.function(args)


# === Handlers ===

class Handler(ABC):
    """
    Host callback for a matched command.

    Handlers receive the host's execution context untouched and the
    coerced arguments, and return the text that replaces the call.
    """

    @abstractmethod
    def invoke(self, context: Any, args: Sequence[Any]) -> str:
        """
        Run the command.

        Args:
            context: Host-owned execution context
            args: Coerced arguments from the decider

        Returns:
            Output text

        Raises:
            CommandError: To report failure
        """
        raise NotImplementedError


class FunctionHandler(Handler):
    """Handler backed by a plain function(context, args)"""

    def __init__(self, function: Callable[[Any, Sequence[Any]], str]):
        self.function = function

    def invoke(self, context: Any, args: Sequence[Any]) -> str:
        result = self.function(context, args)
        if result is None:
            return ""
        return result if isinstance(result, str) else str(result)

    def __repr__(self):
        return f'FunctionHandler({getattr(self.function, "__name__", self.function)!r})'


def as_handler(handler: Union[Handler, Callable]) -> Handler:
    """Wrap a plain callable as a Handler"""
    if isinstance(handler, Handler):
        return handler
    if callable(handler):
        return FunctionHandler(handler)
    raise TypeError(f"Handler must be a Handler or callable, got {type(handler).__name__}")


@dataclass(frozen=True)
class CommandEntry:
    """One registration: name, decider and handler"""
    name: str
    decider: Decider
    handler: Handler

    @property
    def signature(self) -> str:
        return f"{self.name} {self.decider.description}".rstrip()
