"""Frame composition for the viewing session.

Builds one full-screen frame from engine state: a header row, a divider, a
hint/status row and the viewport body. Display lines are clipped to the
terminal width by display columns, so wide characters never wrap.
"""

from __future__ import annotations

import unicodedata

from .engine import PlaybackEngine
from .highlight import DisplayLine, DisplaySpan

APP_TITLE = "codescroller"
HINT_TEXT = "q quit • space pause • n/p next/prev • r reload • home/end jump • ←/→ also work"
CHROME_ROWS = 3

RESET = "\033[0m"
TITLE_STYLE = "\033[32m"
DIM_STYLE = "\033[90m"
DIVIDER_STYLE = "\033[2m"
CLEAR_TO_EOL = "\033[K"


def char_display_width(ch: str) -> int:
    """Return terminal column width for one character.

    Combining marks consume no columns and East Asian wide/fullwidth
    characters consume two.
    """
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def clip_text(text: str, max_cols: int) -> str:
    """Trim ``text`` to at most ``max_cols`` display columns."""
    out: list[str] = []
    col = 0
    for ch in text:
        w = char_display_width(ch)
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
    return "".join(out)


def clip_line(line: DisplayLine, max_cols: int) -> DisplayLine:
    """Clip a display line to ``max_cols`` columns, keeping span colors."""
    if max_cols <= 0:
        return ()
    out: list[DisplaySpan] = []
    remaining = max_cols
    for span in line:
        if remaining <= 0:
            break
        clipped = clip_text(span.text, remaining)
        if clipped:
            out.append(DisplaySpan(clipped, span.color))
        if len(clipped) < len(span.text):
            break
        remaining -= sum(char_display_width(ch) for ch in clipped)
    return tuple(out)


def line_to_ansi(line: DisplayLine, color: bool = True) -> str:
    """Serialize a display line using 24-bit foreground escapes."""
    out: list[str] = []
    styled = False
    for span in line:
        if color and span.color is not None:
            r, g, b = span.color
            out.append(f"\033[38;2;{r};{g};{b}m")
            styled = True
        elif styled:
            out.append(RESET)
            styled = False
        out.append(span.text)
    if styled:
        out.append(RESET)
    return "".join(out)


def header_text(engine: PlaybackEngine) -> str:
    document = engine.document
    path = document.path if document is not None else ""
    syntax = document.syntax_name if document is not None else ""
    mode = "PAUSED" if engine.state.paused else "PLAY"
    return f"{path}  ({engine.state.index + 1}/{len(engine.queue)})  [{syntax}]  {mode}"


def body_height(lines: int) -> int:
    """Rows left for source text once the chrome rows are drawn."""
    return max(1, lines - CHROME_ROWS)


def build_frame(engine: PlaybackEngine, columns: int, lines: int, color: bool = True) -> list[str]:
    """Return one string per screen row for the current engine state."""
    width = max(1, columns)

    def styled(text: str, style: str) -> str:
        clipped = clip_text(text, width)
        if not color or not clipped:
            return clipped
        return f"{style}{clipped}{RESET}"

    title = f"{APP_TITLE} — "
    header = clip_text(title + header_text(engine), width)
    if color and header.startswith(APP_TITLE):
        header = f"{TITLE_STYLE}{APP_TITLE}{RESET}{header[len(APP_TITLE):]}"

    rows = [
        header,
        styled("─" * width, DIVIDER_STYLE),
        styled(engine.state.status_message or HINT_TEXT, DIM_STYLE),
    ]
    for line in engine.visible_lines(body_height(lines)):
        rows.append(line_to_ansi(clip_line(line, width), color))
    return rows[: max(1, lines)]


def render_frame(engine: PlaybackEngine, terminal, color: bool = True) -> None:
    """Draw a full frame through ``terminal`` (needs ``size`` and ``write``)."""
    columns, lines = terminal.size()
    rows = build_frame(engine, columns, lines, color)
    terminal.write("\033[H" + "\r\n".join(row + CLEAR_TO_EOL for row in rows))
