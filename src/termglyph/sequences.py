"""Escape sequences used by the termglyph formatter.

Every sequence here has a fixed length. The lengths are quoted the way the
wire contract states them, terminator included, so the number of characters
actually injected is always ``LENGTH - 1``.
"""

from enum import Enum
from types import MappingProxyType
from typing import Tuple, Union

ESC = "\x1b"

DIRECT_COLOR_SEQUENCE_LENGTH = 20
INDEXED_COLOR_SEQUENCE_LENGTH = 7
TEXT_STYLE_SEQUENCE_LENGTH = 6


class Layer(Enum):
    FOREGROUND = "3"
    BACKGROUND = "4"


class Style(Enum):
    BOLD = "bold"
    DIM = "dim"
    ITALIC = "italic"
    UNDERLINE = "underline"
    DOUBLE_UNDERLINE = "double_underline"
    BLINK = "blink"
    INVERSE = "inverse"
    HIDDEN = "hidden"
    STRIKETHROUGH = "strikethrough"


class IndexedColor(Enum):
    """Palette colors. Values are the foreground sequences."""

    BLACK = f"{ESC}[030m"
    RED = f"{ESC}[031m"
    GREEN = f"{ESC}[032m"
    YELLOW = f"{ESC}[033m"
    BLUE = f"{ESC}[034m"
    MAGENTA = f"{ESC}[035m"
    CYAN = f"{ESC}[036m"
    WHITE = f"{ESC}[037m"

    BRIGHT_BLACK = f"{ESC}[090m"
    BRIGHT_RED = f"{ESC}[091m"
    BRIGHT_GREEN = f"{ESC}[092m"
    BRIGHT_YELLOW = f"{ESC}[093m"
    BRIGHT_BLUE = f"{ESC}[094m"
    BRIGHT_MAGENTA = f"{ESC}[095m"
    BRIGHT_CYAN = f"{ESC}[096m"
    BRIGHT_WHITE = f"{ESC}[097m"


RESET_ALL = f"{ESC}[00m"
RESET_FOREGROUND = f"{ESC}[39m"
RESET_BACKGROUND = f"{ESC}[49m"

STYLE_ENABLE = MappingProxyType({
    Style.BOLD: f"{ESC}[01m",
    Style.DIM: f"{ESC}[02m",
    Style.ITALIC: f"{ESC}[03m",
    Style.UNDERLINE: f"{ESC}[04m",
    Style.BLINK: f"{ESC}[05m",
    Style.INVERSE: f"{ESC}[07m",
    Style.HIDDEN: f"{ESC}[08m",
    Style.STRIKETHROUGH: f"{ESC}[09m",
    Style.DOUBLE_UNDERLINE: f"{ESC}[21m",
})

# bold and dim share a reset, as do both underline kinds
STYLE_RESET = MappingProxyType({
    Style.BOLD: f"{ESC}[22m",
    Style.DIM: f"{ESC}[22m",
    Style.ITALIC: f"{ESC}[23m",
    Style.UNDERLINE: f"{ESC}[24m",
    Style.BLINK: f"{ESC}[25m",
    Style.INVERSE: f"{ESC}[27m",
    Style.HIDDEN: f"{ESC}[28m",
    Style.STRIKETHROUGH: f"{ESC}[29m",
    Style.DOUBLE_UNDERLINE: f"{ESC}[24m",
})

RGBValue = Union[int, Tuple[int, int, int]]


def rgb(r: int, g: int, b: int) -> int:
    """Pack red, green and blue components (0-255) into a 24-bit value."""
    for name, v in (("red", r), ("green", g), ("blue", b)):
        if not 0 <= v <= 255:
            raise ValueError(f"{name} component out of range: {v}")
    return (r << 16) | (g << 8) | b


def rgb_components(value: RGBValue) -> Tuple[int, int, int]:
    """Split a 24-bit value (or pass through an ``(r, g, b)`` triple)."""
    if isinstance(value, tuple):
        if len(value) != 3:
            raise ValueError(f"expected an (r, g, b) triple, got {value!r}")
        r, g, b = value
        rgb(r, g, b)  # range check
        return r, g, b
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected a 24-bit RGB int, got {type(value).__name__}")
    if not 0 <= value <= 0xFFFFFF:
        raise ValueError(f"RGB value out of range: {value:#x}")
    return (value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF


def pad3(component: int) -> str:
    """Zero-padded, exactly three digit decimal field."""
    if not 0 <= component <= 255:
        raise ValueError(f"color component out of range: {component}")
    return f"{component:03d}"


def direct_color_sequence(value: RGBValue, layer: Layer) -> str:
    r, g, b = rgb_components(value)
    return f"{ESC}[{layer.value}8;2;{pad3(r)};{pad3(g)};{pad3(b)}m"


def parse_direct_color_sequence(seq: str) -> Tuple[Layer, int, int, int]:
    """Inverse of :func:`direct_color_sequence`."""
    if len(seq) != DIRECT_COLOR_SEQUENCE_LENGTH - 1 or not seq.startswith(ESC + "["):
        raise ValueError(f"not an absolute color sequence: {seq!r}")
    layer = Layer(seq[2])
    return layer, int(seq[7:10]), int(seq[11:14]), int(seq[15:18])


def indexed_sequence(color: Union[IndexedColor, str], layer: Layer) -> str:
    """Palette sequence for ``layer``.

    Palette entries are stored as foreground codes. The background code is
    derived from the layer digit: ``3`` becomes ``4`` for normal colors and
    the bright ``9`` becomes ``10``.
    """
    seq = color.value if isinstance(color, IndexedColor) else color
    if not isinstance(seq, str) or len(seq) != INDEXED_COLOR_SEQUENCE_LENGTH - 1:
        raise ValueError(f"not an indexed color sequence: {seq!r}")
    if layer is Layer.FOREGROUND:
        return seq
    digit = seq[3]
    if digit == "3":
        return seq[:3] + "4" + seq[4:]
    if digit == "9":
        return seq[:2] + "10" + seq[4:]
    raise ValueError(f"cannot derive a background code from {seq!r}")


def palette_color(name: str) -> IndexedColor:
    """Look up a palette entry by name, e.g. ``"bright-red"``."""
    key = name.strip().upper().replace("-", "_").replace(" ", "_")
    try:
        return IndexedColor[key]
    except KeyError:
        raise ValueError(f"unknown palette color: {name}") from None
