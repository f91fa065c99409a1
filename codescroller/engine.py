"""Playback engine: the tick-driven scroll and file-queue state machine.

The engine owns the queue, the loaded document and the playback state. It
performs I/O only inside ``load``; every other transition is an in-memory
update. Rendering code reads state and calls ``apply``/``tick``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .config import PlaybackConfig
from .errors import NoLoadableFilesError
from .file_queue import FileQueue, pseudo_random_index
from .highlight import DisplayLine, Highlighter, HighlightResult, read_text
from .viewport import clamp_scroll, window

logger = logging.getLogger(__name__)

QUIT = "quit"
TOGGLE_PAUSE = "toggle_pause"
NEXT = "next"
PREVIOUS = "previous"
RELOAD = "reload"
JUMP_START = "jump_start"
JUMP_END = "jump_end"

COMMANDS = (QUIT, TOGGLE_PAUSE, NEXT, PREVIOUS, RELOAD, JUMP_START, JUMP_END)

# Exceptions that count as "this file cannot be shown" rather than a bug.
LOAD_ERRORS = (OSError, UnicodeError, ValueError)


@dataclass(frozen=True)
class LoadedDocument:
    """Currently shown file. Replaced wholesale on every load."""

    path: Path
    raw: str
    lines: tuple[DisplayLine, ...]
    syntax_name: str

    @property
    def line_count(self) -> int:
        return len(self.lines)


@dataclass
class PlaybackState:
    index: int = 0
    scroll: int = 0
    paused: bool = False
    status_message: str = ""
    running: bool = True


class PlaybackEngine:
    """State machine driving automatic scrolling through a ``FileQueue``.

    ``loader`` and ``highlighter`` are the only collaborators; both are
    injectable so tests can run without a filesystem or Pygments.
    """

    def __init__(
        self,
        queue: FileQueue,
        config: PlaybackConfig,
        *,
        loader: Callable[[Path], str] = read_text,
        highlighter: Callable[[str, Path], HighlightResult] | None = None,
        random_index: Callable[[int], int] = pseudo_random_index,
    ) -> None:
        if not len(queue):
            raise ValueError("playback requires a non-empty file queue")
        self.queue = queue
        self.config = config
        self.state = PlaybackState()
        self.document: LoadedDocument | None = None
        self._loader = loader
        self._highlighter = highlighter if highlighter is not None else Highlighter(config.style)
        self._random_index = random_index
        self._handlers: dict[str, Callable[[], bool]] = {
            QUIT: self.quit,
            TOGGLE_PAUSE: self.toggle_pause,
            NEXT: self.advance,
            PREVIOUS: self.retreat,
            RELOAD: self.reload,
            JUMP_START: self.jump_to_start,
            JUMP_END: self.jump_to_end,
        }

    # -- queries -----------------------------------------------------------

    @property
    def line_count(self) -> int:
        return self.document.line_count if self.document is not None else 0

    @property
    def clamped_scroll(self) -> int:
        return clamp_scroll(self.state.scroll, self.line_count)

    def visible_lines(self, height: int) -> list[DisplayLine]:
        lines = self.document.lines if self.document is not None else ()
        return window(self.clamped_scroll, lines, height)

    # -- loading -----------------------------------------------------------

    def start(self) -> None:
        """Load the first document, at index 0 or a clock-derived index."""
        index = 0
        if self.config.random_start:
            index = self._random_index(len(self.queue)) % len(self.queue)
        self.load(index)

    def load(self, index: int) -> None:
        """Load ``index``; skip forward (always wrapping) past unreadable files.

        At most one attempt is made per queued file. When all of them fail,
        ``NoLoadableFilesError`` is raised instead of cycling forever.
        """
        self.state.scroll = 0
        self.state.status_message = ""

        candidate = index
        skipped = 0
        last_error = ""
        for _ in range(len(self.queue)):
            path = self.queue[candidate]
            try:
                raw = self._loader(path)
                result = self._highlighter(raw, path)
            except LOAD_ERRORS as exc:
                skipped += 1
                last_error = f"{path} ({exc})"
                logger.warning("skipping unreadable file %s: %s", path, exc)
                next_candidate = self.queue.next_index(candidate, loop=True)
                assert next_candidate is not None
                candidate = next_candidate
                continue

            self.state.index = candidate
            self.document = LoadedDocument(
                path=path,
                raw=raw,
                lines=result.lines,
                syntax_name=result.syntax_name,
            )
            if skipped:
                more = f" and {skipped - 1} more" if skipped > 1 else ""
                self.state.status_message = f"Skipping unreadable file: {last_error}{more}"
            logger.info(
                "loaded %s (%d/%d, %d lines, %s)",
                path,
                candidate + 1,
                len(self.queue),
                len(result.lines),
                result.syntax_name,
            )
            return

        raise NoLoadableFilesError(len(self.queue), last_error)

    # -- transitions -------------------------------------------------------

    def advance(self) -> bool:
        """Move to the next file; ``False`` when at the end and not looping."""
        target = self.queue.next_index(self.state.index, self.config.loop)
        if target is None:
            return False
        self.load(target)
        return True

    def retreat(self) -> bool:
        """Move to the previous file; ``False`` at index 0 when not looping."""
        target = self.queue.previous_index(self.state.index, self.config.loop)
        if target is None:
            return False
        self.load(target)
        return True

    def reload(self) -> bool:
        self.load(self.state.index)
        return True

    def toggle_pause(self) -> bool:
        self.state.paused = not self.state.paused
        return True

    def jump_to_start(self) -> bool:
        self.state.scroll = 0
        return True

    def jump_to_end(self) -> bool:
        self.state.scroll = max(0, self.line_count - 1)
        return True

    def quit(self) -> bool:
        self.state.running = False
        return True

    def apply(self, command: str) -> bool:
        """Apply one discrete command; return whether it was recognized."""
        handler = self._handlers.get(command)
        if handler is None:
            return False
        handler()
        return True

    def tick(self) -> bool:
        """Apply one elapsed tick. Returns ``False`` when paused or stopped.

        Reaching the last line advances to the next file. If there is no
        next file the offset is pinned to the last line.
        """
        if self.state.paused or not self.state.running:
            return False
        self.state.scroll += self.config.step
        last = max(0, self.line_count - 1)
        if self.state.scroll >= last and not self.advance():
            self.state.scroll = last
        return True
