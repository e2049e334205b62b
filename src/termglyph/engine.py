"""Scalar-format engines.

An engine takes the fully resolved format buffer and the arguments left
over after directive resolution, renders them printf-style and reports how
many characters it wrote.
"""

import logging
import sys
from typing import Callable, List, Optional, Sequence, TextIO

from .errors import UnderlyingWriteFailure

LOG = logging.getLogger("termglyph.engine")

Engine = Callable[[str, Sequence], int]


def render_scalar(buffer: str, args: Sequence) -> str:
    try:
        return buffer % tuple(args)
    except (TypeError, ValueError, KeyError) as e:
        raise UnderlyingWriteFailure(f"scalar formatting failed: {e}") from e


class StreamEngine:
    """Writes to ``stream``, or to whatever ``sys.stdout`` is at call time."""

    def __init__(self, stream: Optional[TextIO] = None, flush: bool = True):
        self.stream = stream
        self.flush = flush

    def __call__(self, buffer: str, args: Sequence) -> int:
        text = render_scalar(buffer, args)
        out = self.stream if self.stream is not None else sys.stdout
        try:
            out.write(text)
            if self.flush:
                out.flush()
        except (OSError, ValueError) as e:  # ValueError: closed stream, UnicodeEncodeError
            raise UnderlyingWriteFailure(f"write failed: {e}") from e
        return len(text)


class CaptureEngine:
    """Keeps rendered output in memory."""

    def __init__(self):
        self.chunks: List[str] = []

    def __call__(self, buffer: str, args: Sequence) -> int:
        text = render_scalar(buffer, args)
        self.chunks.append(text)
        return len(text)

    def getvalue(self) -> str:
        return "".join(self.chunks)


def run_engine(engine: Engine, buffer: str, args: Sequence) -> int:
    written = engine(buffer, args)
    if written is None or written < 0:
        raise UnderlyingWriteFailure(f"engine reported failure ({written})")
    LOG.debug("engine wrote %d chars", written)
    return written
