"""
Grammar - tokenizer, call tree builder and stream splitting.
"""

from .parser import CallNode, Literal, build, parse
from .tokenizer import Tokenizer, tokenize

__all__ = ["CallNode", "Literal", "Tokenizer", "build", "parse", "tokenize"]
