"""Exceptions raised by termglyph.

The outward-facing calls (``printf``, ``print_ppm``) turn these into
sentinel return values; everything below them raises.
"""


class TermglyphError(Exception):
    pass


class AllocationFailure(TermglyphError):
    """A buffer or pixel array could not be sized or acquired."""


class MalformedInput(TermglyphError):
    """Bad magic, bad header, wrong max-sample or truncated pixel data."""


class UnknownDirective(MalformedInput):
    def __init__(self, directive: str, position: int):
        super().__init__(f"unrecognized directive {directive!r} at offset {position}")
        self.directive = directive
        self.position = position


class ArgumentMismatch(TermglyphError):
    """A directive found no argument, or one of the wrong type."""


class InvalidOption(TermglyphError, ValueError):
    """An option value that selects nothing usable, e.g. an empty render mode."""


class IOFailure(TermglyphError):
    pass


class UnderlyingWriteFailure(TermglyphError):
    """The scalar-format engine reported an error."""
