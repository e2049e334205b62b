"""Tests for the format-string compiler."""

import io
import re

import pytest
from termglyph.compiler import (
    compile_format,
    directive_argument_kinds,
    estimate_buffer_size,
    printf,
    sprintf,
    write_format,
)
from termglyph.engine import CaptureEngine
from termglyph.errors import (
    AllocationFailure,
    ArgumentMismatch,
    UnderlyingWriteFailure,
    UnknownDirective,
)
from termglyph.options import FormatOptions
from termglyph.sequences import RESET_ALL, IndexedColor, rgb

ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")

# --- Fixtures ---


@pytest.fixture
def capture():
    return CaptureEngine()


def visible(text: str) -> str:
    return ESCAPE_RE.sub("", text)


# --- Tests ---


class TestEstimateBufferSize:
    def test_empty_format_reserves_reset(self):
        assert estimate_buffer_size("") == 6

    def test_plain_text(self):
        assert estimate_buffer_size("abc") == 3 + 6

    def test_every_directive_char_charged_as_absolute_color(self):
        assert estimate_buffer_size("a#b") == 2 + 20 + 6
        assert estimate_buffer_size("##") == 40 + 6

    def test_limit(self):
        with pytest.raises(AllocationFailure):
            estimate_buffer_size("#" * 10, limit=100)

    def test_allocation_failure_produces_no_output(self, capture):
        with pytest.raises(AllocationFailure):
            write_format("#o" * 10, engine=capture, options=FormatOptions(max_buffer_size=50))
        assert capture.getvalue() == ""

    @pytest.mark.parametrize(
        "fmt,args",
        [
            ("", ()),
            ("#0c#0c#0c", ()),
            ("#df#db#if#ib", (1, 2, IndexedColor.RED, IndexedColor.BRIGHT_RED)),
            ("#z#", ()),
            ("#o#m#t#u#k#n#w#h#s", ()),
        ],
    )
    def test_estimate_covers_output(self, fmt, args):
        compiled = compile_format(fmt, args)
        assert len(compiled.buffer) <= compiled.capacity


class TestPlainText:
    def test_count_matches_literal_text(self, capture):
        assert write_format("hello", engine=capture) == 5
        assert capture.getvalue() == "hello" + RESET_ALL

    def test_scalar_directives_pass_through(self, capture):
        assert write_format("%d apples, %s", 3, "ok", engine=capture) == len("3 apples, ok")
        assert capture.getvalue() == "3 apples, ok" + RESET_ALL

    def test_reset_appended_once(self):
        for fmt in ("", "plain", "#0", "#o#0#0"):
            text, _ = sprintf(fmt)
            assert text.endswith(RESET_ALL)
        assert sprintf("plain")[0].count(RESET_ALL) == 1
        assert sprintf("")[0] == RESET_ALL

    @pytest.mark.parametrize("n", [1, 2, 5])
    def test_doubled_directive_char(self, n):
        text, count = sprintf("##" * n)
        assert text == "#" * n + RESET_ALL
        assert count == n


class TestUnrecognized:
    def test_hash_z(self):
        compiled = compile_format("#z", ("unused",))
        assert compiled.buffer == "#z" + RESET_ALL
        assert compiled.args == ("unused",)
        assert sprintf("#z") == ("#z" + RESET_ALL, 2)

    def test_trailing_hash(self):
        assert sprintf("ab#") == ("ab#" + RESET_ALL, 3)

    @pytest.mark.parametrize("fmt", ["#dx", "#i", "#d", "#ix"])
    def test_incomplete_color_directive(self, fmt):
        compiled = compile_format(fmt, (1,))
        assert compiled.buffer == fmt + RESET_ALL
        assert compiled.args == (1,)

    def test_strict_mode_raises(self):
        with pytest.raises(UnknownDirective) as exc:
            compile_format("ok #z", strict=True)
        assert exc.value.position == 3

    def test_strict_mode_accepts_valid(self):
        assert compile_format("##ok#o", strict=True).buffer == "#ok\x1b[01m" + RESET_ALL


class TestColors:
    def test_absolute_foreground(self):
        text, count = sprintf("#dfX", rgb(1, 22, 255))
        assert text == "\x1b[38;2;001;022;255mX" + RESET_ALL
        assert count == 1

    def test_absolute_background(self):
        text, _ = sprintf("#dbX", rgb(255, 255, 255))
        assert text == "\x1b[48;2;255;255;255mX" + RESET_ALL

    def test_absolute_accepts_triple(self):
        assert sprintf("#df", (1, 2, 3))[0].startswith("\x1b[38;2;001;002;003m")

    @pytest.mark.parametrize(
        "fmt,color,expected",
        [
            ("#if", IndexedColor.RED, "\x1b[031m"),
            ("#ib", IndexedColor.RED, "\x1b[041m"),
            ("#if", IndexedColor.BRIGHT_CYAN, "\x1b[096m"),
            ("#ib", IndexedColor.BRIGHT_CYAN, "\x1b[106m"),
        ],
    )
    def test_indexed(self, fmt, color, expected):
        assert sprintf(fmt + "A", color) == (expected + "A" + RESET_ALL, 1)

    def test_directive_args_come_before_scalar_args(self):
        compiled = compile_format("#df%s#ib%d", (rgb(0, 0, 0), IndexedColor.BLUE, "x", 4))
        assert compiled.args == ("x", 4)
        text, count = sprintf("#df%s#ib%d", rgb(0, 0, 0), IndexedColor.BLUE, "x", 4)
        assert visible(text) == "x4"
        assert count == 2

    def test_missing_argument(self):
        with pytest.raises(ArgumentMismatch):
            compile_format("#df")

    @pytest.mark.parametrize("fmt,arg", [("#df", "red"), ("#df", 0x1000000), ("#if", 5), ("#ib", "bogus")])
    def test_wrong_argument(self, fmt, arg):
        with pytest.raises(ArgumentMismatch):
            compile_format(fmt, (arg,))


class TestStyles:
    @pytest.mark.parametrize(
        "directive,seq",
        [
            ("#o", "\x1b[01m"),
            ("#m", "\x1b[02m"),
            ("#t", "\x1b[03m"),
            ("#u", "\x1b[04m"),
            ("#k", "\x1b[05m"),
            ("#n", "\x1b[07m"),
            ("#h", "\x1b[08m"),
            ("#s", "\x1b[09m"),
            ("#w", "\x1b[21m"),
        ],
    )
    def test_enable(self, directive, seq):
        assert sprintf(directive + "x") == (seq + "x" + RESET_ALL, 1)

    @pytest.mark.parametrize(
        "directive,seq",
        [
            ("#0o", "\x1b[22m"),
            ("#0m", "\x1b[22m"),
            ("#0t", "\x1b[23m"),
            ("#0u", "\x1b[24m"),
            ("#0k", "\x1b[25m"),
            ("#0n", "\x1b[27m"),
            ("#0h", "\x1b[28m"),
            ("#0s", "\x1b[29m"),
            ("#0w", "\x1b[24m"),
            ("#0f", "\x1b[39m"),
            ("#0b", "\x1b[49m"),
            ("#0c", "\x1b[39m\x1b[49m"),
        ],
    )
    def test_reset(self, directive, seq):
        assert sprintf(directive + "x") == (seq + "x" + RESET_ALL, 1)

    def test_reset_all(self):
        assert sprintf("#0") == (RESET_ALL + RESET_ALL, 0)

    def test_reset_all_keeps_following_char(self):
        assert sprintf("#0z") == (RESET_ALL + "z" + RESET_ALL, 1)


class TestVisibleCount:
    @pytest.mark.parametrize(
        "fmt,args",
        [
            ("#o#u%s#0u#0o done", ("bold",)),
            ("#df#db%d#0c|#if#ib#0f#0b", (rgb(9, 9, 9), rgb(200, 100, 0), IndexedColor.GREEN, IndexedColor.BRIGHT_BLACK, 42)),
            ("## #z #0 #0c #w#0w %5.2f", (3.14159,)),
            ("#n#k#h#s#t#m#0", ()),
        ],
    )
    def test_count_excludes_escapes(self, fmt, args, capture):
        count = write_format(fmt, *args, engine=capture)
        out = capture.getvalue()
        assert count == len(visible(out))


class TestEngineFailure:
    def test_formatting_error(self, capture):
        with pytest.raises(UnderlyingWriteFailure):
            write_format("%d", "not a number", engine=capture)

    def test_negative_engine_result(self):
        with pytest.raises(UnderlyingWriteFailure):
            write_format("x", engine=lambda buf, args: -1)


class TestPrintf:
    def test_writes_to_file(self):
        out = io.StringIO()
        assert printf("#o%s", "hi", file=out) == 2
        assert out.getvalue() == "\x1b[01mhi" + RESET_ALL

    def test_defaults_to_stdout(self, capsys):
        assert printf("##%d", 7) == 2
        assert capsys.readouterr().out == "#7" + RESET_ALL

    def test_failure_returns_minus_one(self):
        out = io.StringIO()
        assert printf("%d", "x", file=out) == -1
        assert printf("#df", file=out) == -1
        assert out.getvalue() == ""

    def test_strict(self):
        assert printf("#q", file=io.StringIO(), strict=True) == -1

    def test_closed_stream_returns_minus_one(self):
        out = io.StringIO()
        out.close()
        assert printf("hi", file=out) == -1

    def test_unencodable_output_returns_minus_one(self, tmp_path):
        with open(tmp_path / "out.txt", "w", encoding="ascii") as out:
            assert printf("caf%s", "é", file=out) == -1

    def test_surplus_scalar_arguments_return_minus_one(self):
        out = io.StringIO()
        assert printf("hi", 5, file=out) == -1
        assert out.getvalue() == ""


class TestDirectiveArgumentKinds:
    def test_kinds_in_order(self):
        assert directive_argument_kinds("#df #ib ## #dx #if") == ["direct", "indexed", "indexed"]

    def test_doubled_hash_is_not_a_directive(self):
        assert directive_argument_kinds("##df") == []

    def test_none(self):
        assert directive_argument_kinds("plain %d") == []
