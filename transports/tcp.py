"""
TCP transport - serve an evaluator over asyncio streams.

Each connection gets its own execution context from context_factory and
its own framing state. Responses use the same framing as the stream shell,
one line per statement. An oversized statement disconnects the client.

    $ nc localhost 7000
    add 1 (add 2 3)
    6
"""

import asyncio
import codecs
from typing import Any, Callable, Optional

import structlog

from errors import ErrorKind
from evaluator import Evaluator
from shell import CHUNK_SIZE, LineFramer

logger = structlog.get_logger("nestshell.transport")

BUFFER_FULL_MESSAGE = "Err: Internal buffer is full, disconnecting"


async def handle_connection(
    evaluator: Evaluator,
    context: Any,
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    chunk_size: int = CHUNK_SIZE,
) -> None:
    """
    Serve one client until it disconnects.

    Args:
        evaluator: Shared evaluator (registration must be complete)
        context: Execution context for this connection only
        reader: Client input stream
        writer: Client output stream
    """
    log = logger.bind(peer=str(writer.get_extra_info("peername")))
    log.info("connection_opened")

    framer = LineFramer(evaluator.limits.max_input_length)
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    try:
        while True:
            data = await reader.read(chunk_size)
            if not data:
                log.info("remote_disconnected")
                return

            for frame in framer.feed(decoder.decode(data)):
                if frame.error is not None and frame.error.error == ErrorKind.INPUT_TOO_LONG:
                    log.warning("buffer_full")
                    writer.write((BUFFER_FULL_MESSAGE + "\n").encode("utf-8"))
                    await writer.drain()
                    return

                if frame.error is not None:
                    response = frame.error
                else:
                    log.info("got_input", statement=frame.statement)
                    response = evaluator.evaluate(frame.statement, context)

                writer.write((response.render() + "\n").encode("utf-8"))
                await writer.drain()
    except ConnectionError as e:
        log.error("connection_error", error=str(e))
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except ConnectionError:
            pass


async def serve(
    evaluator: Evaluator,
    context_factory: Callable[[], Any],
    host: str = "127.0.0.1",
    port: int = 0,
) -> asyncio.AbstractServer:
    """
    Start listening; returns the running server.

    Args:
        evaluator: Evaluator shared by all connections
        context_factory: Builds a fresh context per connection
        host: Interface to bind
        port: Port to bind (0 picks a free port)
    """

    async def on_connect(reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        await handle_connection(evaluator, context_factory(), reader, writer)

    server = await asyncio.start_server(on_connect, host, port)
    for sock in server.sockets:
        logger.info("listening", address=str(sock.getsockname()))
    return server


def bound_port(server: asyncio.AbstractServer) -> Optional[int]:
    """Port of the first listening socket"""
    for sock in server.sockets:
        return sock.getsockname()[1]
    return None
