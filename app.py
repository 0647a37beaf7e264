"""
app.py - nestshell command line entry point

Runs a demo evaluator over stdin/stdout, or serves it over TCP.

Usage:
    python app.py                          # Read statements from stdin
    python app.py --serve 127.0.0.1:7000   # Serve over TCP
    python app.py --max-depth 4            # Tighter nesting limit
"""

import asyncio
import signal
import sys
from typing import Optional, TextIO, Tuple

import structlog

from commands.base import CommandError
from commands.deciders import ANY_I32, ANY_U8, MANY_I32, MANY_STRING, Signature
from config import Limits
from evaluator import Evaluator
from logging_config import configure_logging
from shell import Shell
from transports.tcp import serve

logger = structlog.get_logger("nestshell.app")


# === Demo commands ===

def _echo(context, args):
    return " ".join(args)


def _add(context, args):
    return str(sum(args))


def _set_level(context, args):
    context["level"] = args[0]
    return ""


def _get_level(context, args):
    return str(context.get("level", 0))


def _fail(context, args):
    raise CommandError(" ".join(args) or "Command failed")


def build_evaluator(limits: Limits = None) -> Evaluator:
    """Evaluator with the demo command set registered."""
    evaluator = Evaluator(limits)
    evaluator.register_many([
        ("echo", None, _echo),
        ("echo", MANY_STRING, _echo),
        ("add", MANY_I32, _add),
        ("log", Signature("level", ANY_U8), _set_level),
        ("log", Signature("level"), _get_level),
        ("neg", ANY_I32, lambda context, args: str(-args[0])),
        ("fail", None, _fail),
        ("fail", MANY_STRING, _fail),
    ])
    return evaluator


def new_context() -> dict:
    return {"level": 0}


def parse_address(value: str) -> Tuple[str, int]:
    """Split HOST:PORT; raises ValueError on malformed input."""
    host, sep, port = value.rpartition(":")
    if not sep or not host:
        raise ValueError(f"Expected HOST:PORT, got {value!r}")
    return host, int(port)


class App:
    """
    nestshell application lifecycle.

    Handles:
    - Evaluator construction
    - Stream shell over stdin/stdout
    - TCP server with signal handling for graceful shutdown
    """

    def __init__(self, limits: Limits = None):
        self.limits = limits or Limits.from_env()
        self.evaluator = build_evaluator(self.limits)
        self._shutdown_event: Optional[asyncio.Event] = None

    def run_shell(self, reader: TextIO = None, writer: TextIO = None) -> int:
        """Evaluate statements from reader until it ends."""
        shell = Shell(self.evaluator, new_context(), reader or sys.stdin, writer or sys.stdout)
        return shell.run()

    async def serve(self, host: str, port: int):
        """Serve until SIGINT/SIGTERM."""
        self._shutdown_event = asyncio.Event()

        if sys.platform != 'win32':
            try:
                loop = asyncio.get_running_loop()
                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.add_signal_handler(sig, self._handle_shutdown)
            except NotImplementedError:
                pass

        server = await serve(self.evaluator, new_context, host, port)
        async with server:
            try:
                await self._shutdown_event.wait()
            except KeyboardInterrupt:
                logger.info("shutdown_requested")

        logger.info("server_stopped")

    def _handle_shutdown(self):
        logger.info("shutdown_requested")
        if self._shutdown_event:
            self._shutdown_event.set()


def main(argv=None):
    """Entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Run nestshell")
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum command nesting depth (default: 10)"
    )
    parser.add_argument(
        "--max-input-length",
        type=int,
        default=None,
        help="Maximum statement length in characters (default: 10000)"
    )
    parser.add_argument(
        "--serve",
        metavar="HOST:PORT",
        default=None,
        help="Serve over TCP instead of reading stdin"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level for stderr output (default: WARNING)"
    )
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    try:
        env_limits = Limits.from_env()
        limits = Limits(
            max_depth=env_limits.max_depth if args.max_depth is None else args.max_depth,
            max_input_length=(env_limits.max_input_length if args.max_input_length is None
                              else args.max_input_length),
        )
    except ValueError as e:
        parser.error(str(e))

    app = App(limits)

    if args.serve is None:
        app.run_shell()
        return 0

    try:
        host, port = parse_address(args.serve)
    except ValueError as e:
        parser.error(str(e))

    asyncio.run(app.serve(host, port))
    return 0


if __name__ == "__main__":
    sys.exit(main())
