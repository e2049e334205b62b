# unified_cli.py
import sys
import importlib
from typing import Sequence, List, Optional

COMMANDS = {
    "print": ("termglyph.print_cmd", "printf with #-directives for colors and styles"),
    "ppm": ("termglyph.glyphs", "render a P6 pixmap as colored ASCII glyphs"),
}


def usage(file=None) -> None:
    file = file or sys.stdout
    print("Usage: termglyph <command> [args...]", file=file)
    print("Commands:", file=file)
    width = max(len(c) for c in COMMANDS)
    for name in sorted(COMMANDS):
        print(f"  {name.ljust(width)}  {COMMANDS[name][1]}", file=file)


def _call_entry(entry, argv: List[str]) -> int:
    """Run a command ``main``; argparse exits become return codes."""
    try:
        code = entry(argv)
    except SystemExit as se:
        code = se.code
    except Exception as e:
        print(f"Error running command: {e}", file=sys.stderr)
        return 1
    return code if isinstance(code, int) else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    if not argv or argv[0] in ("-h", "--help"):
        usage()
        return 0
    if argv[0] == "--version":
        from . import __version__
        print(f"termglyph {__version__}")
        return 0

    cmd, *args = argv
    if cmd not in COMMANDS:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        usage(file=sys.stderr)
        return 2

    module_path = COMMANDS[cmd][0]
    try:
        module = importlib.import_module(module_path)
    except Exception as e:
        print(f"Failed to import command '{cmd}' ({module_path}): {e}", file=sys.stderr)
        return 3

    entry = getattr(module, "main", None)
    if not callable(entry):
        print(f"Command module '{module_path}' has no callable 'main'", file=sys.stderr)
        return 4

    return _call_entry(entry, args)


if __name__ == "__main__":
    raise SystemExit(main())
