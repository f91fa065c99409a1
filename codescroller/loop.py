"""Cooperative control loop for the viewing session.

One iteration renders when something changed, waits for a key no longer than
the remaining tick budget, applies that key's command and then applies at
most one tick. Everything runs on the calling thread.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from .clock import TickClock
from .engine import PlaybackEngine
from .keys import command_for_key, read_key
from .render import render_frame
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def run_main_loop(
    engine: PlaybackEngine,
    terminal: TerminalController,
    stdin_fd: int,
    *,
    color: bool = True,
    clock: TickClock | None = None,
    read: Callable[[int, int | None], str] = read_key,
    draw: Callable[..., None] = render_frame,
) -> None:
    """Run until the engine stops. Terminal state is restored on every exit."""
    if clock is None:
        clock = TickClock(engine.config.tick_seconds)
    dirty = True
    last_size: tuple[int, int] | None = None

    with terminal.raw_mode():
        while engine.state.running:
            size = terminal.size()
            if size != last_size:
                last_size = size
                dirty = True
            if dirty:
                draw(engine, terminal, color)
                dirty = False

            key = read(stdin_fd, math.ceil(clock.remaining() * 1000))
            command = command_for_key(key) if key else None
            if command is not None:
                logger.debug("key %r -> %s", key, command)
                engine.apply(command)
                dirty = True
                if not engine.state.running:
                    break

            if clock.consume() and engine.tick():
                dirty = True
    logger.info("session ended")
