import logging
import sys
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Optional

from .sequences import Layer


class RenderMode(IntFlag):
    ASCII = 1       # ramp glyphs
    COLOURED = 2    # pixel color

    @classmethod
    def parse(cls, name: str) -> "RenderMode":
        name = name.lower()
        if name == "ascii":
            return cls.ASCII
        if name in ("coloured", "colored", "color", "colour"):
            return cls.COLOURED
        if name == "both":
            return cls.ASCII | cls.COLOURED
        raise ValueError(f"unknown render mode: {name}")


# -----------------------------
# Data model / options
# -----------------------------

@dataclass
class FormatOptions:
    strict: bool = False                    # raise on unrecognized directives
    max_buffer_size: int = 16 * 1024 * 1024  # estimator ceiling, in chars


@dataclass
class GlyphOptions:
    mode: RenderMode = RenderMode.ASCII | RenderMode.COLOURED
    layer: Layer = Layer.BACKGROUND
    cols: Optional[int] = None  # None => render the file at native size


@dataclass
class Options:
    debug: bool = False
    log_path: Optional[str] = None

    format: FormatOptions = field(default_factory=FormatOptions)
    glyph: GlyphOptions = field(default_factory=GlyphOptions)


LOG = logging.getLogger("termglyph")


def setup_logging(debug: bool, log_path: Optional[str] = None) -> None:
    level = logging.DEBUG if debug else logging.WARNING
    LOG.setLevel(level)

    fmt = logging.Formatter("%(levelname)s: %(message)s")

    handlers: list[logging.Handler] = []

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(fmt)
    handlers.append(sh)

    if log_path:
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s: %(message)s"))
        handlers.append(fh)

    LOG.handlers[:] = handlers
    LOG.propagate = False
