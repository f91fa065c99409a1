"""Filesystem walk, extension/size filtering, and the ordered file queue."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Iterable, Iterator
from pathlib import Path

from .errors import EmptyQueueError

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (
    "rs", "toml", "c", "h", "cpp", "hpp", "cc", "cs", "go", "py", "js", "ts", "jsx", "tsx",
    "java", "kt", "swift", "php", "rb", "lua", "sh", "ps1", "sql", "html", "css", "json",
    "yml", "yaml", "md",
)


def parse_exts(value: str | None) -> frozenset[str]:
    """Parse a comma-separated extension list into normalized extensions.

    ``None`` selects ``DEFAULT_EXTENSIONS``. Leading dots are dropped and
    entries are lower-cased; blank entries are ignored.
    """
    if value is None:
        items: Iterable[str] = DEFAULT_EXTENSIONS
    else:
        items = (part.strip() for part in value.split(","))
    return frozenset(item.lstrip(".").lower() for item in items if item.strip().lstrip("."))


def is_allowed(path: Path, exts: frozenset[str], max_kb: int) -> bool:
    """Return whether ``path`` is a visible file with an allowed extension and size."""
    try:
        size = path.stat().st_size
    except OSError:
        return False
    if size > max_kb * 1024:
        return False
    name = path.name
    if name.startswith(".") and len(name) > 1:
        return False
    return path.suffix.lstrip(".").lower() in exts


def _walk_files(root: Path) -> Iterator[Path]:
    """Yield regular files under ``root``, skipping hidden dirs and symlinks."""

    def _on_error(exc: OSError) -> None:
        logger.debug("skipping unreadable directory %s: %s", exc.filename, exc)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames[:] = [name for name in dirnames if not name.startswith(".")]
        base = Path(dirpath)
        for name in filenames:
            candidate = base / name
            if candidate.is_symlink():
                continue
            yield candidate


def collect_files(root: Path, exts: frozenset[str], max_kb: int) -> list[Path]:
    """Return the sorted list of playable files for ``root``.

    A file root yields itself when it passes the filter. Directories are
    walked recursively; unreadable entries are skipped silently.
    """
    if root.is_file():
        return [root] if is_allowed(root, exts, max_kb) else []
    out = [path for path in _walk_files(root) if is_allowed(path, exts, max_kb)]
    out.sort()
    logger.info("collected %d file(s) under %s", len(out), root)
    return out


def pseudo_random_index(length: int, now_ns: int | None = None) -> int:
    """Pick a start index from the wall clock; not suitable for anything secret."""
    if length <= 0:
        return 0
    if now_ns is None:
        now_ns = time.time_ns()
    return now_ns % length


class FileQueue:
    """Ordered, immutable sequence of file paths.

    The queue never changes after construction. Navigation helpers return
    neighbour indices and leave the current position to the caller.
    """

    def __init__(self, paths: Iterable[Path]) -> None:
        self._paths: tuple[Path, ...] = tuple(paths)

    @classmethod
    def from_root(cls, root: Path, exts: frozenset[str], max_kb: int) -> FileQueue:
        """Build a queue from a file or directory; raise when nothing matches."""
        queue = cls(collect_files(root, exts, max_kb))
        if not queue:
            raise EmptyQueueError(root)
        return queue

    def __len__(self) -> int:
        return len(self._paths)

    def __getitem__(self, index: int) -> Path:
        return self._paths[index]

    def __iter__(self) -> Iterator[Path]:
        return iter(self._paths)

    def next_index(self, index: int, loop: bool) -> int | None:
        """Index after ``index``, wrapping when ``loop``; ``None`` at a hard end."""
        if index + 1 < len(self._paths):
            return index + 1
        if loop and self._paths:
            return 0
        return None

    def previous_index(self, index: int, loop: bool) -> int | None:
        """Index before ``index``, wrapping when ``loop``; ``None`` at a hard start."""
        if index > 0:
            return index - 1
        if loop and self._paths:
            return len(self._paths) - 1
        return None
