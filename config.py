"""
Interpreter limits.

Limits are fixed when the evaluator is built and read-only while a line is
parsed and evaluated.
"""

import os
from dataclasses import dataclass


# === Defaults ===

MAX_INPUT_LENGTH = 10000  # Maximum raw command text length in characters
MAX_DEPTH = 10            # Maximum parenthesis nesting of calls

ENV_PREFIX = "NESTSHELL_"


@dataclass(frozen=True)
class Limits:
    """
    Resource limits enforced during tokenization and evaluation.

    max_depth counts nested calls: "a (b (c))" has depth 2, a flat
    "a b c" has depth 0.
    """
    max_depth: int = MAX_DEPTH
    max_input_length: int = MAX_INPUT_LENGTH

    def __post_init__(self):
        if not isinstance(self.max_depth, int) or isinstance(self.max_depth, bool):
            raise ValueError(f"max_depth must be an integer, got {self.max_depth!r}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {self.max_depth}")
        if not isinstance(self.max_input_length, int) or isinstance(self.max_input_length, bool):
            raise ValueError(f"max_input_length must be an integer, got {self.max_input_length!r}")
        if self.max_input_length <= 0:
            raise ValueError(f"max_input_length must be positive, got {self.max_input_length}")

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, environ=None) -> 'Limits':
        """
        Build limits from environment variables.

        Reads <prefix>MAX_DEPTH and <prefix>MAX_INPUT_LENGTH; unset values
        keep their defaults.

        Raises:
            ValueError: If a variable is set but not a valid integer
        """
        environ = os.environ if environ is None else environ

        def read(name: str, default: int) -> int:
            raw = environ.get(prefix + name)
            if raw is None or not raw.strip():
                return default
            try:
                return int(raw)
            except ValueError:
                raise ValueError(f"{prefix}{name} must be an integer, got {raw!r}") from None

        return cls(
            max_depth=read("MAX_DEPTH", MAX_DEPTH),
            max_input_length=read("MAX_INPUT_LENGTH", MAX_INPUT_LENGTH),
        )
