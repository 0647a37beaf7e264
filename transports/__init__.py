"""
Transports - feed command text into an evaluator from the outside world.

The core never performs I/O; transports read statements, evaluate them and
write feedback back to the client.
"""

from .tcp import handle_connection, serve

__all__ = ["handle_connection", "serve"]
