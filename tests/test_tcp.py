"""Tests for transports/tcp.py - serving an evaluator over TCP."""

import asyncio

import pytest

from commands.deciders import MANY_I32
from config import Limits
from evaluator import Evaluator
from transports.tcp import BUFFER_FULL_MESSAGE, bound_port, serve


def build_evaluator(max_input_length=100):
    evaluator = Evaluator(Limits(max_input_length=max_input_length))
    evaluator.register("add", MANY_I32, lambda context, args: str(sum(args)))

    def count(context, args):
        context["count"] += 1
        return str(context["count"])

    evaluator.register("count", None, count)
    return evaluator


async def exchange(reader, writer, line):
    writer.write(line.encode("utf-8"))
    await writer.drain()
    response = await asyncio.wait_for(reader.readline(), timeout=5)
    return response.decode("utf-8").rstrip("\n")


class TestTcpTransport:
    """Test the asyncio TCP transport."""

    @pytest.mark.asyncio
    async def test_round_trip(self):
        """Statements get one response line each"""
        server = await serve(build_evaluator(), lambda: {"count": 0}, "127.0.0.1", 0)
        async with server:
            reader, writer = await asyncio.open_connection("127.0.0.1", bound_port(server))
            try:
                assert await exchange(reader, writer, "add 1 (add 2 3)\n") == "6"
                assert await exchange(reader, writer, "nope\n") == "Err: Unrecognized command: nope"
                assert await exchange(reader, writer, "add 1 (\nadd 2\n)\n") == "3"
            finally:
                writer.close()
                await writer.wait_closed()

    @pytest.mark.asyncio
    async def test_context_per_connection(self):
        """Each connection gets its own context"""
        server = await serve(build_evaluator(), lambda: {"count": 0}, "127.0.0.1", 0)
        async with server:
            port = bound_port(server)
            first = await asyncio.open_connection("127.0.0.1", port)
            second = await asyncio.open_connection("127.0.0.1", port)
            try:
                assert await exchange(*first, "count\n") == "1"
                assert await exchange(*first, "count\n") == "2"
                assert await exchange(*second, "count\n") == "1"
            finally:
                for _, writer in (first, second):
                    writer.close()
                    await writer.wait_closed()

    @pytest.mark.asyncio
    async def test_overflow_disconnects(self):
        """Oversized statements close the connection"""
        server = await serve(build_evaluator(max_input_length=10), lambda: {"count": 0}, "127.0.0.1", 0)
        async with server:
            reader, writer = await asyncio.open_connection("127.0.0.1", bound_port(server))
            try:
                assert await exchange(reader, writer, "x" * 50 + "\n") == BUFFER_FULL_MESSAGE
                rest = await asyncio.wait_for(reader.read(), timeout=5)
                assert rest == b""
            finally:
                writer.close()
                await writer.wait_closed()

    @pytest.mark.asyncio
    async def test_unmatched_close_keeps_connection(self):
        server = await serve(build_evaluator(), lambda: {"count": 0}, "127.0.0.1", 0)
        async with server:
            reader, writer = await asyncio.open_connection("127.0.0.1", bound_port(server))
            try:
                response = await exchange(reader, writer, "add 1)\n")
                assert response.startswith("Err: Right parenthesis")
                assert await exchange(reader, writer, "add 2\n") == "2"
            finally:
                writer.close()
                await writer.wait_closed()
