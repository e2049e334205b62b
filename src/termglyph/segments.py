"""Typed segments for building styled output.

Instead of lining up positional arguments with the directives in a format
string, callers compose a sequence of segments::

    compose(SetColor(rgb(255, 0, 0)), SetStyle(Style.BOLD), "total: ",
            Value(42, "d"), Reset()).write()

The composition is compiled into a format string and an argument tuple in
the right order, then sent through the regular compiler, so visible counts
are computed exactly as for :func:`termglyph.compiler.printf`.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

from .compiler import DIRECTIVE, STYLE_CODES, sprintf, write_format
from .engine import Engine, StreamEngine
from .options import FormatOptions
from .sequences import IndexedColor, Layer, RGBValue, Style, rgb_components

_STYLE_LETTERS = {style: letter for letter, style in STYLE_CODES.items()}
_LAYER_LETTERS = {Layer.FOREGROUND: "f", Layer.BACKGROUND: "b"}
_COLOR_RESET_LETTERS = {"foreground": "f", "background": "b", "colors": "c"}

# characters that would turn a bare reset-all into an attribute reset
_RESET_SUFFIXES = set(_STYLE_LETTERS.values()) | set(_COLOR_RESET_LETTERS.values())


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class SetColor:
    color: Union[RGBValue, IndexedColor]
    layer: Layer = Layer.FOREGROUND


@dataclass(frozen=True)
class SetStyle:
    style: Style


@dataclass(frozen=True)
class Reset:
    """Reset one style, ``"foreground"``, ``"background"``, ``"colors"``,
    or everything (None)."""

    target: Union[Style, str, None] = None


@dataclass(frozen=True)
class Value:
    """A scalar rendered with a printf conversion, e.g. ``Value(3.5, ".2f")``."""

    value: Any
    spec: str = "s"


Segment = Union[Text, SetColor, SetStyle, Reset, Value]


def _escape(text: str) -> str:
    return text.replace(DIRECTIVE, DIRECTIVE * 2).replace("%", "%%")


def _fragment(seg: Segment) -> Tuple[str, List[Any], List[Any]]:
    """(format fragment, directive args, scalar args) for one segment."""
    if isinstance(seg, Text):
        return _escape(seg.text), [], []

    if isinstance(seg, SetColor):
        layer = _LAYER_LETTERS[seg.layer]
        if isinstance(seg.color, IndexedColor):
            return f"#i{layer}", [seg.color], []
        rgb_components(seg.color)
        return f"#d{layer}", [seg.color], []

    if isinstance(seg, SetStyle):
        return "#" + _STYLE_LETTERS[seg.style], [], []

    if isinstance(seg, Reset):
        if seg.target is None:
            return "#0", [], []
        if isinstance(seg.target, Style):
            return "#0" + _STYLE_LETTERS[seg.target], [], []
        try:
            return "#0" + _COLOR_RESET_LETTERS[seg.target], [], []
        except KeyError:
            raise ValueError(f"unknown reset target: {seg.target!r}") from None

    if isinstance(seg, Value):
        if not seg.spec or "%" in seg.spec:
            raise ValueError(f"invalid conversion spec: {seg.spec!r}")
        return "%" + seg.spec.replace(DIRECTIVE, DIRECTIVE * 2), [], [seg.value]

    raise TypeError(f"not a segment: {seg!r}")


class Composition:
    def __init__(self, segments: Sequence[Union[Segment, str]]):
        self.segments: Tuple[Segment, ...] = tuple(
            Text(s) if isinstance(s, str) else s for s in segments
        )

    def __repr__(self):
        return f"Composition({list(self.segments)!r})"

    def __add__(self, other: "Composition") -> "Composition":
        return Composition(self.segments + other.segments)

    def to_format(self) -> Tuple[str, tuple]:
        """Format string and argument tuple for the compiler."""
        # empty text adds nothing and would hide the next fragment from the #0 guard
        parts = [p for p in (_fragment(seg) for seg in self.segments) if p[0]]
        fmt: List[str] = []
        directive_args: List[Any] = []
        scalar_args: List[Any] = []
        for k, (frag, d_args, s_args) in enumerate(parts):
            fmt.append(frag)
            directive_args.extend(d_args)
            scalar_args.extend(s_args)
            if frag == "#0" and k + 1 < len(parts):
                nxt = parts[k + 1][0]
                if nxt[:1] in _RESET_SUFFIXES:
                    # an empty conversion keeps "#0" from swallowing the next char
                    fmt.append("%s")
                    scalar_args.append("")
        return "".join(fmt), tuple(directive_args + scalar_args)

    def write(
        self,
        engine: Optional[Engine] = None,
        file=None,
        options: Optional[FormatOptions] = None,
    ) -> int:
        fmt, args = self.to_format()
        return write_format(fmt, *args, engine=engine or StreamEngine(file), options=options)

    def render(self) -> Tuple[str, int]:
        fmt, args = self.to_format()
        return sprintf(fmt, *args)


def compose(*segments: Union[Segment, str]) -> Composition:
    return Composition(segments)
