"""
Commands - deciders, handlers and the command table.

Hosts register commands as (name, decider, handler). The evaluator resolves
each call in a parsed line against the table and invokes the handler.
"""

from .base import Accept, CommandEntry, CommandError, Decider, Deny, FunctionDecider, FunctionHandler, Handler
from .deciders import Denied, Predicate, Signature
from .table import CommandTable

__all__ = [
    "Accept",
    "CommandEntry",
    "CommandError",
    "CommandTable",
    "Decider",
    "Denied",
    "Deny",
    "FunctionDecider",
    "FunctionHandler",
    "Handler",
    "Predicate",
    "Signature",
]
