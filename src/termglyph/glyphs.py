#!/usr/bin/env python3
"""Render truecolor bitmaps as colored ASCII glyphs.

Each pixel becomes one glyph from a density ramp, picked by luminance,
drawn through the format compiler with the pixel's own color.
"""
import argparse
import logging
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from .compiler import write_format
from .engine import Engine, StreamEngine
from .errors import AllocationFailure, InvalidOption, IOFailure, MalformedInput, TermglyphError
from .options import GlyphOptions, Options, RenderMode, setup_logging
from .sequences import Layer

LOG = logging.getLogger("termglyph.glyphs")

RAMP = " .:-=+*#%@"  # sparse -> dense

PPM_MAGIC = b"P6"
PPM_MAXVAL = 255

# Rec. 709 weights scaled to integers so the sum is exactly 10000
_LUMA_WEIGHTS = np.array([2126, 7152, 722], dtype=np.uint32)

# terminal cells are about twice as tall as they are wide
CELL_ASPECT = 0.5


@dataclass
class Pixmap:
    width: int
    height: int
    pixels: np.ndarray  # height x width x 3, uint8


# -----------------------------
# PPM parsing
# -----------------------------
def _skip_space_and_comments(data: bytes, i: int) -> int:
    n = len(data)
    while i < n:
        c = data[i:i + 1]
        if c.isspace():
            i += 1
        elif c == b"#":
            nl = data.find(b"\n", i)
            if nl < 0:
                return n
            i = nl + 1
        else:
            break
    return i


def _read_token(data: bytes, i: int, name: str):
    i = _skip_space_and_comments(data, i)
    j = i
    while j < len(data) and data[j:j + 1].isdigit():
        j += 1
    if j == i:
        if i >= len(data):
            raise MalformedInput(f"header ends before {name}")
        raise MalformedInput(f"expected {name}, got {data[i:i + 1]!r}")
    return int(data[i:j]), j


def parse_ppm(data: bytes) -> Pixmap:
    """Parse a binary RGB pixmap (P6) with a max sample value of 255."""
    if data[:2] != PPM_MAGIC:
        raise MalformedInput(f"bad magic {data[:2]!r}, expected {PPM_MAGIC!r}")

    width, i = _read_token(data, 2, "width")
    height, i = _read_token(data, i, "height")
    maxval, i = _read_token(data, i, "max sample value")
    if maxval != PPM_MAXVAL:
        raise MalformedInput(f"max sample value must be {PPM_MAXVAL}, got {maxval}")
    if width < 1 or height < 1:
        raise MalformedInput(f"empty image ({width}x{height})")

    while i < len(data) and data[i:i + 1].isspace():
        i += 1

    expected = width * height * 3
    available = len(data) - i
    if available < expected:
        raise MalformedInput(f"truncated pixel data: {available} of {expected} bytes")

    try:
        pixels = np.frombuffer(data, dtype=np.uint8, count=expected, offset=i)
        pixels = pixels.reshape(height, width, 3)
    except MemoryError as e:
        raise AllocationFailure(f"cannot hold {width}x{height} pixels") from e

    LOG.debug("P6 %dx%d, pixel data at offset %d", width, height, i)
    return Pixmap(width, height, pixels)


def read_ppm(path: str) -> Pixmap:
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise IOFailure(f"cannot read {path}: {e}") from e
    return parse_ppm(data)


def load_image(path: str, cols: int) -> Pixmap:
    """Load any image Pillow can read, scaled to ``cols`` glyphs wide."""
    if cols < 1:
        raise ValueError("cols must be positive")
    try:
        with Image.open(path) as src:
            img = src.convert("RGB")
    except UnidentifiedImageError as e:
        raise MalformedInput(f"unrecognized image: {path}") from e
    except OSError as e:
        raise IOFailure(f"cannot read {path}: {e}") from e

    W, H = img.size
    rows = max(1, int((H / W) * cols * CELL_ASPECT))
    img = img.resize((cols, rows), resample=Image.Resampling.BILINEAR)
    LOG.debug("Loaded %s: %dx%d -> %dx%d glyphs", path, W, H, cols, rows)
    return Pixmap(cols, rows, np.asarray(img, dtype=np.uint8))


# -----------------------------
# Luminance / ramp
# -----------------------------
def luminance(pixels: np.ndarray) -> np.ndarray:
    """0.2126 R + 0.7152 G + 0.0722 B, truncated to 0..255.

    Linear weights on the stored values, no gamma correction.
    """
    return ((pixels.astype(np.uint32) @ _LUMA_WEIGHTS) // 10000).astype(np.uint8)


def ramp_indices(lum: np.ndarray, ramp: str = RAMP) -> np.ndarray:
    return lum.astype(np.uint32) * (len(ramp) - 1) // 255


def glyph_for(lum: int, ramp: str = RAMP) -> str:
    return ramp[lum * (len(ramp) - 1) // 255]


# -----------------------------
# Rendering
# -----------------------------
def render_pixmap(
    pixmap: Pixmap,
    options: Optional[GlyphOptions] = None,
    engine: Optional[Engine] = None,
) -> int:
    """Draw ``pixmap`` one formatting call per pixel plus one per row end.

    Returns the number of visible characters written.
    """
    opt = options or GlyphOptions()
    if not opt.mode & (RenderMode.ASCII | RenderMode.COLOURED):
        raise InvalidOption(f"render mode selects nothing: {opt.mode!r}")
    engine = engine or StreamEngine()

    glyphs = opt.mode & RenderMode.ASCII
    coloured = opt.mode & RenderMode.COLOURED
    layer = "b" if opt.layer is Layer.BACKGROUND else "f"
    pixel_fmt = f"#d{layer}%c" if coloured else "%c"

    idx = ramp_indices(luminance(pixmap.pixels)).tolist()
    rows = pixmap.pixels.tolist()

    total = 0
    for y in range(pixmap.height):
        for x in range(pixmap.width):
            ch = RAMP[idx[y][x]] if glyphs else " "
            if coloured:
                r, g, b = rows[y][x]
                total += write_format(pixel_fmt, (r << 16) | (g << 8) | b, ch, engine=engine)
            else:
                total += write_format(pixel_fmt, ch, engine=engine)
        total += write_format("\n", engine=engine)
    return total


def render_ppm(path: str, options: Optional[GlyphOptions] = None, engine: Optional[Engine] = None) -> int:
    return render_pixmap(read_ppm(path), options, engine)


def render_image(path: str, cols: int, options: Optional[GlyphOptions] = None,
                 engine: Optional[Engine] = None) -> int:
    return render_pixmap(load_image(path, cols), options, engine)


def print_ppm(
    path: str,
    mode: RenderMode = RenderMode.ASCII | RenderMode.COLOURED,
    layer: Layer = Layer.BACKGROUND,
    file=None,
) -> int:
    """Print a P6 file to ``file`` (stdout by default). 0 on success, 1 on failure."""
    try:
        render_ppm(path, GlyphOptions(mode=mode, layer=layer), StreamEngine(file))
    except TermglyphError as e:
        LOG.warning("print_ppm failed: %s", e)
        return 1
    return 0


# -----------------------------
# CLI
# -----------------------------
def parse_args(argv=None):
    ap = argparse.ArgumentParser(
        prog="termglyph ppm",
        description="Render a P6 pixmap (or, with --cols, any image) as colored ASCII glyphs",
    )
    ap.add_argument("input", help="Input image path")
    ap.add_argument(
        "-o", "--output", default=None, help="Output file (default: stdout)"
    )
    ap.add_argument(
        "--mode",
        choices=["ascii", "coloured", "both"],
        default="both",
        help="ascii = glyphs only; coloured = colored blank cells; both = colored glyphs",
    )
    ap.add_argument(
        "--layer",
        choices=["fg", "bg"],
        default="bg",
        help="Layer that receives the pixel color",
    )
    ap.add_argument(
        "-c", "--cols", type=int, default=None,
        help="Scale to N columns; accepts any format Pillow can read",
    )
    ap.add_argument("--debug", action="store_true", help="Debug logging to stderr")
    ap.add_argument("--log", dest="log_path", default=None, help="Also log to FILE")
    args = ap.parse_args(argv)

    opt = Options(debug=args.debug, log_path=args.log_path)
    opt.glyph.mode = RenderMode.parse(args.mode)
    opt.glyph.layer = Layer.FOREGROUND if args.layer == "fg" else Layer.BACKGROUND
    opt.glyph.cols = args.cols
    return args.input, args.output, opt


def main(argv=None) -> int:
    path, out_path, opt = parse_args(argv)
    setup_logging(opt.debug, opt.log_path)

    t0 = time.perf_counter()
    LOG.debug("Args: mode=%s layer=%s cols=%s", opt.glyph.mode, opt.glyph.layer, opt.glyph.cols)

    out = None
    try:
        if out_path:
            out = open(out_path, "w", encoding="utf-8")
        engine = StreamEngine(out, flush=False)
        if opt.glyph.cols is not None:
            count = render_image(path, opt.glyph.cols, opt.glyph, engine)
        else:
            count = render_ppm(path, opt.glyph, engine)
    except (TermglyphError, ValueError) as e:
        LOG.error("%s", e)
        return 1
    except OSError as e:
        LOG.error("cannot write %s: %s", out_path, e)
        return 1
    finally:
        if out is not None:
            out.close()

    LOG.debug("Wrote %d visible chars in %.3fs", count, time.perf_counter() - t0)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
