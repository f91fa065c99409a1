"""Per-session playback configuration.

Values come from the command line once at startup and are never mutated.
Nothing is persisted between sessions.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_log_dir

APP_NAME = "codescroller"
LOG_FILENAME = "codescroller.log"
DEFAULT_LOG_FILE = Path(user_log_dir(APP_NAME, appauthor=False)) / LOG_FILENAME

DEFAULT_TICK_MS = 60
MIN_TICK_MS = 5
DEFAULT_STEP = 1
DEFAULT_MAX_KB = 512
DEFAULT_STYLE = "monokai"


@dataclass(frozen=True)
class PlaybackConfig:
    """Immutable knobs for one viewing session."""

    tick_ms: int = DEFAULT_TICK_MS
    step: int = DEFAULT_STEP
    loop: bool = True
    random_start: bool = False
    style: str = DEFAULT_STYLE

    def __post_init__(self) -> None:
        # Frozen dataclass: normalize through object.__setattr__.
        object.__setattr__(self, "tick_ms", max(MIN_TICK_MS, int(self.tick_ms)))
        object.__setattr__(self, "step", max(1, int(self.step)))

    @property
    def tick_seconds(self) -> float:
        return self.tick_ms / 1000.0
