"""Format-string compiler.

A format string mixes ``#`` directives (colors and styles) with ordinary
``%`` conversions. The compiler resolves the ``#`` directives into escape
sequences in one pass, consuming one call argument per color directive,
and hands the resolved buffer plus the leftover arguments to a scalar
engine. The count returned to the caller leaves out every injected escape
character, so it matches what actually occupies terminal columns.

Directives::

    #df #db   absolute (24-bit) color, foreground / background
    #if #ib   indexed palette color, foreground / background
    #o #m #t #u #k #n #w #h #s
              bold, dim, italic, underline, blink, inverse,
              double underline, hidden, strikethrough
    #0X       reset attribute X (any of the above, or f / b / c for colors)
    #0        reset everything
    ##        literal '#'

Color arguments come first, in directive order, before the arguments for
the ``%`` conversions.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .engine import CaptureEngine, Engine, StreamEngine, run_engine
from .errors import AllocationFailure, ArgumentMismatch, TermglyphError, UnknownDirective
from .options import FormatOptions
from .sequences import (
    DIRECT_COLOR_SEQUENCE_LENGTH,
    RESET_ALL,
    RESET_BACKGROUND,
    RESET_FOREGROUND,
    STYLE_ENABLE,
    STYLE_RESET,
    TEXT_STYLE_SEQUENCE_LENGTH,
    Layer,
    Style,
    direct_color_sequence,
    indexed_sequence,
)

LOG = logging.getLogger("termglyph.compiler")

DIRECTIVE = "#"

_LAYERS = {"f": Layer.FOREGROUND, "b": Layer.BACKGROUND}

STYLE_CODES = {
    "o": Style.BOLD,
    "m": Style.DIM,
    "t": Style.ITALIC,
    "u": Style.UNDERLINE,
    "k": Style.BLINK,
    "n": Style.INVERSE,
    "w": Style.DOUBLE_UNDERLINE,
    "h": Style.HIDDEN,
    "s": Style.STRIKETHROUGH,
}

_COLOR_RESETS = {
    "f": (RESET_FOREGROUND,),
    "b": (RESET_BACKGROUND,),
    "c": (RESET_FOREGROUND, RESET_BACKGROUND),
}


# -----------------------------
# Buffer sizing
# -----------------------------

def estimate_buffer_size(fmt: str, limit: Optional[int] = None) -> int:
    """Upper bound on the resolved buffer length.

    Every ``#`` is charged as the longest possible expansion, whether or
    not it starts a valid directive, plus room for the closing reset.
    """
    n_directive = fmt.count(DIRECTIVE)
    size = (len(fmt) - n_directive) + n_directive * DIRECT_COLOR_SEQUENCE_LENGTH
    size += TEXT_STYLE_SEQUENCE_LENGTH
    if limit is not None and size > limit:
        raise AllocationFailure(f"format needs a {size}-char buffer, limit is {limit}")
    return size


class OutputBuffer:
    """Fixed-capacity write buffer with a cursor."""

    def __init__(self, capacity: int):
        if capacity < 0:
            raise AllocationFailure(f"invalid buffer size {capacity}")
        self.capacity = capacity
        self.cursor = 0
        self._chunks: List[str] = []

    def write(self, text: str) -> None:
        self.cursor += len(text)
        assert self.cursor <= self.capacity, "buffer estimate exceeded"
        self._chunks.append(text)

    def getvalue(self) -> str:
        return "".join(self._chunks)


class ArgumentCursor:
    def __init__(self, args: Sequence):
        self._args = tuple(args)
        self.position = 0

    def take(self, directive: str):
        if self.position >= len(self._args):
            raise ArgumentMismatch(
                f"{directive} expects argument #{self.position + 1}, "
                f"only {len(self._args)} given"
            )
        value = self._args[self.position]
        self.position += 1
        return value

    def remaining(self) -> tuple:
        return self._args[self.position:]


@dataclass(frozen=True)
class CompiledFormat:
    buffer: str
    args: tuple
    adjustment: int  # negative: minus every injected escape char
    capacity: int


# -----------------------------
# Directive resolution
# -----------------------------

def _resolve(fmt: str, i: int, cursor: ArgumentCursor) -> Optional[Tuple[Tuple[str, ...], int]]:
    """Classify the directive at ``fmt[i]``.

    Returns the sequences to emit and how many format characters the
    directive spans, or None when it is not a directive.
    """
    code = fmt[i + 1:i + 2]
    arg = fmt[i + 2:i + 3]

    if code == "d" and arg in _LAYERS:
        directive = fmt[i:i + 3]
        value = cursor.take(directive)
        try:
            seq = direct_color_sequence(value, _LAYERS[arg])
        except (TypeError, ValueError) as e:
            raise ArgumentMismatch(f"{directive}: {e}") from e
        return (seq,), 3

    if code == "i" and arg in _LAYERS:
        directive = fmt[i:i + 3]
        value = cursor.take(directive)
        try:
            seq = indexed_sequence(value, _LAYERS[arg])
        except ValueError as e:
            raise ArgumentMismatch(f"{directive}: {e}") from e
        return (seq,), 3

    if code in STYLE_CODES:
        return (STYLE_ENABLE[STYLE_CODES[code]],), 2

    if code == "0":
        if arg in STYLE_CODES:
            return (STYLE_RESET[STYLE_CODES[arg]],), 3
        if arg in _COLOR_RESETS:
            return _COLOR_RESETS[arg], 3
        return (RESET_ALL,), 2

    return None


def compile_format(
    fmt: str,
    args: Sequence = (),
    strict: bool = False,
    max_buffer_size: Optional[int] = None,
) -> CompiledFormat:
    """Resolve every ``#`` directive in ``fmt``.

    ``%`` conversions are left untouched for the scalar engine, together
    with the arguments the directives did not consume.
    """
    capacity = estimate_buffer_size(fmt, max_buffer_size)
    buf = OutputBuffer(capacity)
    cursor = ArgumentCursor(args)
    adjustment = 0

    i = 0
    n = len(fmt)
    while i < n:
        j = fmt.find(DIRECTIVE, i)
        if j < 0:
            buf.write(fmt[i:])
            break
        if j > i:
            buf.write(fmt[i:j])
        i = j

        if fmt[i + 1:i + 2] == DIRECTIVE:
            buf.write(DIRECTIVE)
            i += 2
            continue

        resolved = _resolve(fmt, i, cursor)
        if resolved is None:
            if strict:
                raise UnknownDirective(fmt[i:i + 2], i)
            buf.write(DIRECTIVE)
            i += 1
            continue

        seqs, span = resolved
        for seq in seqs:
            buf.write(seq)
            adjustment -= len(seq)
        i += span

    buf.write(RESET_ALL)
    adjustment -= len(RESET_ALL)

    return CompiledFormat(
        buffer=buf.getvalue(),
        args=cursor.remaining(),
        adjustment=adjustment,
        capacity=capacity,
    )


def directive_argument_kinds(fmt: str) -> List[str]:
    """Kind of argument each directive in ``fmt`` consumes, in order.

    ``"direct"`` for ``#df``/``#db`` and ``"indexed"`` for ``#if``/``#ib``.
    """
    kinds = []
    i = 0
    while True:
        i = fmt.find(DIRECTIVE, i)
        if i < 0:
            return kinds
        code = fmt[i + 1:i + 2]
        if code == DIRECTIVE:
            i += 2
        elif code in ("d", "i") and fmt[i + 2:i + 3] in _LAYERS:
            kinds.append("direct" if code == "d" else "indexed")
            i += 3
        else:
            i += 1


# -----------------------------
# Output
# -----------------------------

def write_format(
    fmt: str,
    *args,
    engine: Optional[Engine] = None,
    options: Optional[FormatOptions] = None,
) -> int:
    """Compile ``fmt`` and send it through ``engine``.

    Returns the number of visible characters written. Raises
    :class:`~termglyph.errors.TermglyphError` subclasses on failure.
    """
    opt = options or FormatOptions()
    compiled = compile_format(fmt, args, strict=opt.strict, max_buffer_size=opt.max_buffer_size)
    LOG.debug(
        "compiled %d-char format: capacity=%d used=%d adjustment=%d leftover_args=%d",
        len(fmt), compiled.capacity, len(compiled.buffer), compiled.adjustment, len(compiled.args),
    )
    written = run_engine(engine or StreamEngine(), compiled.buffer, compiled.args)
    return written + compiled.adjustment


def printf(fmt: str, *args, file=None, strict: bool = False) -> int:
    """Write styled output to ``file`` (stdout by default).

    Returns the visible character count, or -1 on failure. Output already
    written before a failure stays written. Unlike C printf, surplus
    ``%`` arguments are a formatting error, so they also give -1.
    """
    try:
        return write_format(
            fmt, *args,
            engine=StreamEngine(file),
            options=FormatOptions(strict=strict),
        )
    except TermglyphError as e:
        LOG.warning("printf failed: %s", e)
        return -1


def sprintf(fmt: str, *args, strict: bool = False) -> Tuple[str, int]:
    """Like :func:`write_format` but returns ``(text, visible_count)``."""
    engine = CaptureEngine()
    count = write_format(fmt, *args, engine=engine, options=FormatOptions(strict=strict))
    return engine.getvalue(), count
