"""Low-level terminal key decoding and the key-to-command table.

Reads raw bytes from stdin and translates them into normalized key tokens,
then maps tokens onto playback engine commands.
"""

from __future__ import annotations

import os
import select

from . import engine

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

KEY_BINDINGS: dict[str, str] = {
    "q": engine.QUIT,
    "Q": engine.QUIT,
    "CTRL_C": engine.QUIT,
    " ": engine.TOGGLE_PAUSE,
    "n": engine.NEXT,
    "RIGHT": engine.NEXT,
    "p": engine.PREVIOUS,
    "LEFT": engine.PREVIOUS,
    "r": engine.RELOAD,
    "HOME": engine.JUMP_START,
    "g": engine.JUMP_START,
    "END": engine.JUMP_END,
    "G": engine.JUMP_END,
}

_CSI_FINAL_KEYS = {
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}
_CSI_TILDE_KEYS = {
    b"1": "HOME",
    b"7": "HOME",
    b"4": "END",
    b"8": "END",
}


def command_for_key(key: str) -> str | None:
    """Return the engine command bound to ``key``, if any."""
    return KEY_BINDINGS.get(key)


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Read one key token, waiting at most ``timeout_ms``; ``""`` on timeout."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    if ch == b"\x03":
        return "CTRL_C"

    if ch != b"\x1b":
        return ch.decode("utf-8", errors="replace")

    # Escape / arrow / Home / End sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq == b"O":
        # SS3 form sent by some terminals in application cursor mode.
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "ESC"
        return _CSI_FINAL_KEYS.get(final, "ESC")
    if seq != b"[":
        _PENDING_BYTES.append(seq)
        return "ESC"
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq in _CSI_FINAL_KEYS:
        return _CSI_FINAL_KEYS[seq]
    if seq in _CSI_TILDE_KEYS:
        tail = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if tail == b"~":
            return _CSI_TILDE_KEYS[seq]
    return "ESC"
