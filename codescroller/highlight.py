"""Source loading and Pygments-backed highlighting into display lines.

The engine only sees ``DisplayLine`` tuples; Pygments token types and styles
stay inside this module. Colors are resolved to RGB once per style.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name, get_lexer_for_filename, guess_lexer
from pygments.modeline import get_filetype_from_buffer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .config import DEFAULT_STYLE

logger = logging.getLogger(__name__)

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
TAB_SIZE = 4
LEXER_OPTIONS = {"stripnl": False, "ensurenl": True, "tabsize": TAB_SIZE}
# First lines that announce their own syntax: shebangs, XML/PHP and doctype declarations.
SNIFF_PREFIXES = ("#!", "<?", "<!")

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class DisplaySpan:
    """One run of text drawn in a single foreground color (``None`` = default)."""

    text: str
    color: RGB | None = None


DisplayLine = tuple[DisplaySpan, ...]
BLANK_LINE: DisplayLine = ()


@dataclass(frozen=True)
class HighlightResult:
    lines: tuple[DisplayLine, ...]
    syntax_name: str


def read_text(path: Path) -> str:
    """Read text using tolerant encoding fallback order.

    Attempts UTF-8, UTF-8 with BOM, then latin-1; as a final fallback decodes
    raw bytes with UTF-8 replacement semantics. ``OSError`` propagates.
    """
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def parse_hex_color(value: str | None) -> RGB | None:
    """Convert a Pygments ``rrggbb`` (or ``rgb``) string into an RGB tuple."""
    if not value:
        return None
    value = value.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        return None
    try:
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    except ValueError:
        return None


class Palette:
    """Token-type to RGB lookup for one Pygments style, memoized per token type."""

    def __init__(self, style: str = DEFAULT_STYLE) -> None:
        try:
            self._style = get_style_by_name(style)
            self.name = style
        except ClassNotFound:
            logger.warning("unknown style %r, falling back to %s", style, DEFAULT_STYLE)
            self._style = get_style_by_name(DEFAULT_STYLE)
            self.name = DEFAULT_STYLE
        self._colors: dict[object, RGB | None] = {}

    def color_for(self, ttype) -> RGB | None:
        if ttype not in self._colors:
            self._colors[ttype] = parse_hex_color(self._style.style_for_token(ttype).get("color"))
        return self._colors[ttype]


def pick_lexer(path: Path, source: str) -> Lexer:
    """Choose a lexer by filename, then by first-line sniffing, then plain text.

    Sniffing only trusts an editor modeline or a first line that declares its
    own syntax; free text never triggers a heuristic guess.
    """
    try:
        return get_lexer_for_filename(path.name, source, **LEXER_OPTIONS)
    except ClassNotFound:
        pass
    filetype = get_filetype_from_buffer(source)
    if filetype:
        try:
            return get_lexer_by_name(filetype, **LEXER_OPTIONS)
        except ClassNotFound:
            pass
    first_line = source.split("\n", 1)[0].lstrip("\ufeff")
    if first_line.startswith(SNIFF_PREFIXES):
        try:
            return guess_lexer(first_line, **LEXER_OPTIONS)
        except ClassNotFound:
            pass
    return TextLexer(**LEXER_OPTIONS)


def tokens_to_lines(tokens, palette: Palette) -> tuple[DisplayLine, ...]:
    """Split a Pygments token stream into display lines on newline boundaries.

    Adjacent fragments with equal colors are merged. At least one line is
    always returned.
    """
    lines: list[DisplayLine] = []
    current: list[DisplaySpan] = []

    def push(text: str, color: RGB | None) -> None:
        if current and current[-1].color == color:
            current[-1] = DisplaySpan(current[-1].text + text, color)
        else:
            current.append(DisplaySpan(text, color))

    for ttype, value in tokens:
        color = palette.color_for(ttype)
        for part_idx, part in enumerate(value.split("\n")):
            if part_idx > 0:
                lines.append(tuple(current))
                current = []
            if part:
                push(part, color)
    if current:
        lines.append(tuple(current))
    if not lines:
        lines.append(BLANK_LINE)
    return tuple(lines)


class Highlighter:
    """Callable adapter: ``(source, path) -> HighlightResult``."""

    def __init__(self, style: str = DEFAULT_STYLE) -> None:
        self.palette = Palette(style)

    def __call__(self, source: str, path: Path) -> HighlightResult:
        text = sanitize_terminal_text(source)
        lexer = pick_lexer(path, text)
        lines = tokens_to_lines(lexer.get_tokens(text), self.palette)
        return HighlightResult(lines=lines, syntax_name=lexer.name)
