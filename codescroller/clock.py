"""Fixed-interval tick scheduling for the cooperative control loop."""

from __future__ import annotations

import time
from collections.abc import Callable


class TickClock:
    """Track one tick boundary at a time.

    ``consume`` fires at most once per call no matter how many intervals have
    passed, so scroll speed never depends on how often input arrives.
    """

    def __init__(self, interval: float, now: Callable[[], float] = time.monotonic) -> None:
        self.interval = max(0.0, float(interval))
        self._now = now
        self._last_tick = now()

    def remaining(self) -> float:
        """Seconds left until the next tick, floored at zero."""
        return max(0.0, self.interval - (self._now() - self._last_tick))

    def consume(self) -> bool:
        """Return ``True`` and restart the interval when a tick has elapsed."""
        current = self._now()
        if current - self._last_tick < self.interval:
            return False
        self._last_tick = current
        return True
