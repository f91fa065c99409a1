"""Viewport windowing: map a scroll offset onto a fixed-height slice of lines."""

from __future__ import annotations

from collections.abc import Sequence

from .highlight import BLANK_LINE, DisplayLine


def clamp_scroll(scroll: int, line_count: int) -> int:
    """Clamp ``scroll`` into ``[0, max(0, line_count - 1)]``."""
    return max(0, min(scroll, max(0, line_count - 1)))


def window(scroll: int, lines: Sequence[DisplayLine], height: int) -> list[DisplayLine]:
    """Return exactly ``height`` lines starting at the clamped ``scroll``.

    Short content and the tail of a file are padded with blank lines so the
    frame layout never shifts.
    """
    if height <= 0:
        return []
    start = clamp_scroll(scroll, len(lines))
    end = min(start + height, len(lines))
    visible = list(lines[start:end])
    visible.extend([BLANK_LINE] * (height - len(visible)))
    return visible
