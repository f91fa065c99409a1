"""Exception types surfaced by codescroller.

Per-file read failures never reach here; the engine turns them into status
messages. These errors end the session and are reported by the CLI.
"""

from __future__ import annotations

from pathlib import Path


class CodeScrollerError(Exception):
    """Base class for fatal, user-reportable errors."""


class EmptyQueueError(CodeScrollerError):
    """No file under the requested root passed the extension/size filter."""

    def __init__(self, root: Path) -> None:
        super().__init__(f"No matching code files found under {root}")
        self.root = root


class NoLoadableFilesError(CodeScrollerError):
    """Every file in the queue failed to load."""

    def __init__(self, attempts: int, last_error: str) -> None:
        super().__init__(f"None of the {attempts} queued file(s) could be loaded (last error: {last_error})")
        self.attempts = attempts
        self.last_error = last_error


class TerminalInitError(CodeScrollerError):
    """The controlling terminal could not be put into interactive mode."""
