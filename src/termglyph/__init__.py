"""termglyph - styled terminal printf and truecolor ASCII rendering."""

__version__ = "0.1.0"

"""
Expose lightweight lazy wrappers to avoid importing submodules at package
import time. Importing submodules in `__init__` causes `runpy` to warn when
executing a module with `-m` because the submodule may already appear in
`sys.modules` before execution. Wrappers import on-demand.
"""


def printf(*args, **kwargs):
    from .compiler import printf as _f

    return _f(*args, **kwargs)


def sprintf(*args, **kwargs):
    from .compiler import sprintf as _f

    return _f(*args, **kwargs)


def print_ppm(*args, **kwargs):
    from .glyphs import print_ppm as _f

    return _f(*args, **kwargs)


def print_main(*args, **kwargs):
    from .print_cmd import main as _m

    return _m(*args, **kwargs)


def ppm_main(*args, **kwargs):
    from .glyphs import main as _m

    return _m(*args, **kwargs)


__all__ = [
    "printf",
    "sprintf",
    "print_ppm",
    "print_main",
    "ppm_main",
]
