#!/usr/bin/env python3
"""``termglyph print``: styled printf from the command line.

    termglyph print '#df#o%s#0 has %d items' 0xff8800 cart 3
"""
import argparse
import codecs
import logging
import sys
from typing import List, Sequence

from .compiler import directive_argument_kinds, write_format
from .engine import StreamEngine
from .errors import TermglyphError
from .options import Options, setup_logging
from .sequences import IndexedColor, palette_color, rgb

LOG = logging.getLogger("termglyph.print")


def coerce_direct(token: str) -> int:
    """Accepts ``0xRRGGBB``, ``#RRGGBB``, ``R,G,B`` or a decimal value."""
    t = token.strip()
    if "," in t:
        parts = [p.strip() for p in t.split(",")]
        if len(parts) != 3:
            raise ValueError(f"expected R,G,B, got {token!r}")
        return rgb(*(int(p) for p in parts))
    if t.startswith("#"):
        return int(t[1:], 16)
    return int(t, 0)


def coerce_indexed(token: str) -> IndexedColor:
    return palette_color(token)


def coerce_scalar(token: str):
    for conv in (int, float):
        try:
            return conv(token)
        except ValueError:
            pass
    return token


def coerce_arguments(fmt: str, raw: Sequence[str]) -> List:
    """Directive arguments first, typed by their directive; the rest scalar."""
    kinds = directive_argument_kinds(fmt)
    if len(raw) < len(kinds):
        raise ValueError(
            f"format has {len(kinds)} color directives but only {len(raw)} arguments"
        )
    out = []
    for kind, token in zip(kinds, raw):
        out.append(coerce_direct(token) if kind == "direct" else coerce_indexed(token))
    out.extend(coerce_scalar(t) for t in raw[len(kinds):])
    return out


def parse_args(argv=None):
    ap = argparse.ArgumentParser(
        prog="termglyph print",
        description="Print a format string with #-directives for colors and styles",
    )
    ap.add_argument("format", help="Format string, e.g. '#db#o%%s#0'")
    ap.add_argument("args", nargs="*", help="Color arguments first, then %%-arguments")
    ap.add_argument("-n", "--no-newline", action="store_true", help="Do not append a newline")
    ap.add_argument("-e", "--escapes", action="store_true",
                    help="Interpret backslash escapes (\\n, \\t, ...) in the format")
    ap.add_argument("--strict", action="store_true", help="Fail on unrecognized directives")
    ap.add_argument("--count", action="store_true",
                    help="Report the visible character count on stderr")
    ap.add_argument("--debug", action="store_true", help="Debug logging to stderr")
    ap.add_argument("--log", dest="log_path", default=None, help="Also log to FILE")
    args = ap.parse_args(argv)

    opt = Options(debug=args.debug, log_path=args.log_path)
    opt.format.strict = args.strict
    return args, opt


def main(argv=None) -> int:
    args, opt = parse_args(argv)
    setup_logging(opt.debug, opt.log_path)

    fmt = args.format
    if args.escapes:
        fmt = codecs.decode(fmt, "unicode_escape")
    if not args.no_newline:
        fmt += "\n"

    try:
        values = coerce_arguments(fmt, args.args)
        count = write_format(fmt, *values, engine=StreamEngine(), options=opt.format)
    except (TermglyphError, ValueError) as e:
        LOG.error("%s", e)
        return 1

    LOG.debug("visible chars: %d", count)
    if args.count:
        print(count, file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
