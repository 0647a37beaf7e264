"""
shell.py - Stream shell

Drives an evaluator from a character stream (stdin, a pipe, a file) and
writes one response line per statement:

    add 1 2\n          → 3
    echo\n             → Ok
    nope\n             → Err: Unrecognized command: nope

Statements end at a newline outside parentheses, so a call may span lines
while a "(" is open. The shell owns the execution context for its session.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, TextIO

import structlog

from errors import ErrorKind
from evaluator import Evaluator
from feedback import Feedback
from grammar.stream import ParseOp, PartialParse

logger = structlog.get_logger("nestshell.transport")

CHUNK_SIZE = 1024


@dataclass
class Frame:
    """A complete statement, or a framing error to report instead"""
    statement: Optional[str] = None
    error: Optional[Feedback] = None


class LineFramer:
    """
    Accumulates characters into statements.

    The buffer never grows past max_input_length: an oversized statement
    is reported once and skipped up to its terminating newline.
    """

    def __init__(self, max_input_length: int):
        self.max_input_length = max_input_length
        self.parser = PartialParse()
        self.buffer: List[str] = []
        self.discarding = False
        self.overflowed = False

    def feed(self, chunk: str) -> List[Frame]:
        frames = []

        for char in chunk:
            op = self.parser.feed(char)

            if op is ParseOp.DISCARD:
                if not self.discarding:
                    self.discarding = True
                    frames.append(Frame(error=Feedback.err(
                        ErrorKind.UNBALANCED_PARENTHESES,
                        "Right parenthesis encountered with no matching left parenthesis"
                    )))
                self.buffer.clear()
                continue

            if op is ParseOp.READY:
                skipped = self.discarding or self.overflowed
                self.discarding = False
                self.overflowed = False
                statement = "".join(self.buffer)
                self.buffer.clear()
                if not skipped and statement.strip():
                    frames.append(Frame(statement=statement))
                continue

            if self.overflowed:
                continue

            self.buffer.append(char)
            if len(self.buffer) > self.max_input_length:
                self.overflowed = True
                self.buffer.clear()
                frames.append(Frame(error=Feedback.err(
                    ErrorKind.INPUT_TOO_LONG,
                    f"Input too long, statement discarded (maximum is {self.max_input_length} characters)"
                )))

        return frames

    def pending(self) -> str:
        """Unterminated statement text still in the buffer"""
        return "".join(self.buffer)


class Shell:
    """
    Reads statements from reader, evaluates them, writes feedback to writer.

    Usage:
        shell = Shell(evaluator, context={}, reader=sys.stdin, writer=sys.stdout)
        shell.run()
    """

    def __init__(self, evaluator: Evaluator, context: Any, reader: TextIO, writer: TextIO):
        self.evaluator = evaluator
        self.context = context
        self.reader = reader
        self.writer = writer
        self.framer = LineFramer(evaluator.limits.max_input_length)

    def run(self, chunk_size: int = CHUNK_SIZE) -> int:
        """
        Process the stream until it ends.

        A final statement without a trailing newline is still evaluated.

        Returns:
            Number of statements evaluated
        """
        count = 0
        while True:
            chunk = self.reader.read(chunk_size)
            if not chunk:
                break
            count += self.process(chunk)

        rest = self.framer.pending()
        if rest.strip() and not self.framer.overflowed and not self.framer.discarding:
            self.respond(self.evaluator.evaluate(rest, self.context))
            count += 1

        logger.debug("stream_ended", statements=count)
        return count

    def process(self, chunk: str) -> int:
        """Feed a chunk of input; returns statements evaluated"""
        count = 0
        for frame in self.framer.feed(chunk):
            if frame.error is not None:
                logger.warning("input_discarded", reason=frame.error.text)
                self.respond(frame.error)
                continue
            self.respond(self.evaluator.evaluate(frame.statement, self.context))
            count += 1
        return count

    def respond(self, feedback: Feedback):
        self.writer.write(feedback.render() + "\n")
        if hasattr(self.writer, "flush"):
            self.writer.flush()
