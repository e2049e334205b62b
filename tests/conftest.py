import logging

import pytest


@pytest.fixture(autouse=True)
def reset_termglyph_logger():
    """CLI mains attach handlers to the package logger; detach them per test."""
    yield
    log = logging.getLogger("termglyph")
    log.handlers[:] = []
    log.propagate = True
    log.setLevel(logging.NOTSET)


@pytest.fixture
def write_ppm(tmp_path):
    """Factory writing a P6 file; returns its path as a string."""

    def _write(width, height, pixels: bytes, header: bytes = None, name="img.ppm"):
        if header is None:
            header = b"P6\n%d %d\n255\n" % (width, height)
        path = tmp_path / name
        path.write_bytes(header + pixels)
        return str(path)

    return _write
