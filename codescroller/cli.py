"""Command-line front door for codescroller.

Parses CLI options, builds the file queue and loads the first document, then
hands the engine to the interactive loop. Startup failures exit before the
terminal is touched.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import DEFAULT_LOG_FILE, DEFAULT_MAX_KB, DEFAULT_STEP, DEFAULT_STYLE, DEFAULT_TICK_MS, PlaybackConfig
from .engine import PlaybackEngine
from .errors import CodeScrollerError
from .file_queue import FileQueue, parse_exts
from .logs import setup_logging
from .loop import run_main_loop
from .terminal import TerminalController

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on", "y"}
_FALSE_VALUES = {"0", "false", "no", "off", "n"}


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _nonnegative_int(value: str) -> int:
    """argparse type for integer values that may be zero."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def _bool_value(value: str) -> bool:
    """argparse type accepting true/false style words."""
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codescroller",
        description="Auto-scroll code files with syntax highlighting.",
    )
    parser.add_argument("path", help="A file or directory to scroll through.")
    parser.add_argument(
        "--speed-ms",
        type=_nonnegative_int,
        default=DEFAULT_TICK_MS,
        help="Delay between scroll steps in milliseconds.",
    )
    parser.add_argument(
        "--step",
        type=_positive_int,
        default=DEFAULT_STEP,
        help="Number of lines to advance per tick.",
    )
    parser.add_argument(
        "--loop",
        type=_bool_value,
        default=True,
        metavar="BOOL",
        help="Start over after the last file (default: true).",
    )
    parser.add_argument(
        "--exts",
        default=None,
        help="Comma-separated extensions without dots, e.g. rs,go,py,ts.",
    )
    parser.add_argument(
        "--max-kb",
        type=_nonnegative_int,
        default=DEFAULT_MAX_KB,
        help="Maximum file size to load in KB; larger files are skipped.",
    )
    parser.add_argument(
        "--random-start",
        type=_bool_value,
        default=False,
        metavar="BOOL",
        help="Start at a clock-derived file index (default: false).",
    )
    parser.add_argument("--style", default=DEFAULT_STYLE, help="Pygments style name.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument(
        "--log-file",
        type=Path,
        nargs="?",
        const=DEFAULT_LOG_FILE,
        default=None,
        help=f"Write a debug log (default location: {DEFAULT_LOG_FILE}).",
    )
    return parser


def _require_interactive_terminal() -> None:
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        raise SystemExit("codescroller needs an interactive terminal.")


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run a viewing session.

    Missing paths, empty queues and unloadable queues exit with a message
    before raw mode is entered. Errors raised during the session exit the
    same way once the terminal has been restored.
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file)

    path = Path(args.path)
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")

    config = PlaybackConfig(
        tick_ms=args.speed_ms,
        step=args.step,
        loop=args.loop,
        random_start=args.random_start,
        style=args.style,
    )
    try:
        queue = FileQueue.from_root(path, parse_exts(args.exts), args.max_kb)
        _require_interactive_terminal()
        engine = PlaybackEngine(queue, config)
        engine.start()
        stdin_fd = sys.stdin.fileno()
        terminal = TerminalController(stdin_fd, sys.stdout.fileno())
        run_main_loop(engine, terminal, stdin_fd, color=not args.no_color)
    except CodeScrollerError as exc:
        logger.error("%s", exc)
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
