"""Logging configuration for nestshell.

structlog on top of the stdlib logging hierarchy:
    root               → StreamHandler (stderr)
      └─ nestshell     → level set here
           ├─ nestshell.evaluator
           ├─ nestshell.commands
           └─ nestshell.transport

Library modules only call structlog.get_logger("nestshell.<subsystem>");
the entry point decides where output goes by calling configure_logging().
"""

import logging
import sys
from typing import Any, Dict, TextIO

import structlog

LOGGER_PREFIX = "nestshell"

# Longest string value kept in a log event
MAX_VALUE_LENGTH = 200


def truncate_values(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """structlog processor that shortens long string values.

    Command lines can be up to max_input_length characters; logging them
    whole would flood the console.
    """
    for key, value in event_dict.items():
        if key == "event":
            continue
        if isinstance(value, str) and len(value) > MAX_VALUE_LENGTH:
            event_dict[key] = value[:MAX_VALUE_LENGTH] + "..."
    return event_dict


def configure_logging(level: str = "INFO", stream: TextIO = None) -> None:
    """Configure structured logging to a console stream.

    Args:
        level: Level name for the nestshell logger hierarchy.
        stream: Output stream (default: stderr, so stdout stays free for
            command responses).
    """
    level_value = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Handlers filter by level
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(level_value)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    shell_logger = logging.getLogger(LOGGER_PREFIX)
    shell_logger.setLevel(level_value)
    shell_logger.propagate = True

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            truncate_values,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
