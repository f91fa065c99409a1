"""CLI argument handling and startup error tests.

Runs ``codescroller.cli.main`` against temporary trees with the interactive
loop patched out, so only startup wiring is exercised.
"""

from __future__ import annotations

import io
import logging
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from codescroller import cli
from codescroller.errors import TerminalInitError
from codescroller.logs import LOGGER_NAME, setup_logging


def _fake_stdio():
    """Patch stdin/stdout with objects exposing tty-like file descriptors."""
    fake_sys = mock.Mock()
    fake_sys.stdin.fileno.return_value = 0
    fake_sys.stdout.fileno.return_value = 1
    return mock.patch("codescroller.cli.sys", fake_sys)


def _tree(root: Path) -> None:
    (root / "a.py").write_text("print('a')\n", encoding="utf-8")
    (root / "b.rs").write_text("fn main() {}\n", encoding="utf-8")
    (root / "skip.bin").write_text("zzz\n", encoding="utf-8")


class CliMainTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        _tree(self.root)

    def tearDown(self) -> None:
        setup_logging(None)
        self._tmp.cleanup()

    def _run(self, *argv: str):
        with _fake_stdio(), mock.patch("codescroller.cli._require_interactive_terminal"), mock.patch(
            "codescroller.cli.TerminalController"
        ) as terminal_cls, mock.patch("codescroller.cli.run_main_loop") as run_loop:
            cli.main(list(argv))
        return terminal_cls, run_loop

    def test_main_builds_engine_and_runs_loop(self) -> None:
        terminal_cls, run_loop = self._run(str(self.root), "--speed-ms", "100", "--step", "3")

        run_loop.assert_called_once()
        engine, terminal, stdin_fd = run_loop.call_args.args
        self.assertEqual(stdin_fd, 0)
        terminal_cls.assert_called_once_with(0, 1)
        self.assertIs(terminal, terminal_cls.return_value)
        self.assertTrue(run_loop.call_args.kwargs["color"])
        self.assertEqual([path.name for path in engine.queue], ["a.py", "b.rs"])
        self.assertEqual(engine.config.tick_ms, 100)
        self.assertEqual(engine.config.step, 3)
        self.assertTrue(engine.config.loop)
        self.assertFalse(engine.config.random_start)
        assert engine.document is not None
        self.assertEqual(engine.document.path.name, "a.py")

    def test_boolean_options_and_filters(self) -> None:
        _terminal_cls, run_loop = self._run(
            str(self.root),
            "--loop",
            "false",
            "--random-start",
            "no",
            "--exts",
            ".RS",
            "--no-color",
        )

        engine = run_loop.call_args.args[0]
        self.assertFalse(engine.config.loop)
        self.assertEqual([path.name for path in engine.queue], ["b.rs"])
        self.assertFalse(run_loop.call_args.kwargs["color"])

    def test_speed_is_clamped_to_floor(self) -> None:
        _terminal_cls, run_loop = self._run(str(self.root), "--speed-ms", "0")

        self.assertEqual(run_loop.call_args.args[0].config.tick_ms, 5)

    def test_invalid_option_values_exit(self) -> None:
        for argv in (["--step", "0"], ["--loop", "maybe"], ["--max-kb", "-1"]):
            with mock.patch("sys.stderr", io.StringIO()):
                with self.assertRaises(SystemExit) as exc_info:
                    cli.main([str(self.root), *argv])
            self.assertEqual(exc_info.exception.code, 2)

    def test_missing_path_exits_with_message(self) -> None:
        missing = self.root / "nope"

        with self.assertRaises(SystemExit) as exc_info:
            self._run(str(missing))

        self.assertEqual(str(exc_info.exception), f"Path not found: {missing}")

    def test_empty_queue_exits_before_terminal_setup(self) -> None:
        with mock.patch("codescroller.cli.TerminalController") as terminal_cls:
            with self.assertRaises(SystemExit) as exc_info:
                cli.main([str(self.root), "--exts", "zig"])

        self.assertIn("No matching code files found under", str(exc_info.exception))
        terminal_cls.assert_not_called()

    def test_unloadable_queue_exits_before_loop(self) -> None:
        with mock.patch(
            "codescroller.highlight.Highlighter.__call__",
            side_effect=ValueError("cannot lex"),
        ):
            with self.assertRaises(SystemExit) as exc_info:
                self._run(str(self.root))

        self.assertIn("could be loaded", str(exc_info.exception))

    def test_terminal_init_failure_exits(self) -> None:
        with _fake_stdio(), mock.patch("codescroller.cli._require_interactive_terminal"), mock.patch(
            "codescroller.cli.TerminalController",
            side_effect=TerminalInitError("Cannot initialize terminal: not a tty"),
        ), mock.patch("codescroller.cli.run_main_loop") as run_loop:
            with self.assertRaises(SystemExit) as exc_info:
                cli.main([str(self.root)])

        self.assertEqual(str(exc_info.exception), "Cannot initialize terminal: not a tty")
        run_loop.assert_not_called()

    def test_non_interactive_stdio_exits(self) -> None:
        with mock.patch("sys.stdin", io.StringIO()), mock.patch("codescroller.cli.run_main_loop") as run_loop:
            with self.assertRaises(SystemExit) as exc_info:
                cli.main([str(self.root)])

        self.assertEqual(str(exc_info.exception), "codescroller needs an interactive terminal.")
        run_loop.assert_not_called()

    def test_log_file_receives_load_records(self) -> None:
        log_path = self.root / "logs" / "session.log"

        self._run(str(self.root), "--log-file", str(log_path))
        for handler in logging.getLogger(LOGGER_NAME).handlers:
            handler.flush()

        text = log_path.read_text(encoding="utf-8")
        self.assertIn("collected 2 file(s)", text)
        self.assertIn("loaded", text)

    def test_single_file_root(self) -> None:
        _terminal_cls, run_loop = self._run(str(self.root / "b.rs"))

        engine = run_loop.call_args.args[0]
        self.assertEqual(len(engine.queue), 1)
        self.assertEqual(engine.document.syntax_name, "Rust")


if __name__ == "__main__":
    unittest.main()
