"""Terminal Input — raw key decoding and an asyncio key reader.

Invariants:
    - decode_keys() is pure: bytes in, KeyPress events out, unknown sequences dropped
    - The terminal is restored to its original mode on exit, also after errors
    - Keys are delivered through the event queue, never handled here
    - A UTF-8 character split across two reads is decoded once, not dropped

Design Decisions:
    - termios cbreak + loop.add_reader over a curses app: rich owns the screen,
      this module only turns stdin into events
"""

import asyncio
import codecs
import logging
import os
import sys
import termios
import tty
from contextlib import contextmanager
from typing import Iterator

from adr_radar.core.session_state import Key, KeyPress

logger = logging.getLogger(__name__)

_ESCAPE_SEQUENCES: dict[str, Key] = {
    "\x1b[A": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1b[C": Key.RIGHT,
    "\x1b[D": Key.LEFT,
    "\x1bOA": Key.UP,
    "\x1bOB": Key.DOWN,
    "\x1bOC": Key.RIGHT,
    "\x1bOD": Key.LEFT,
}

_CONTROL: dict[str, Key] = {
    "\r": Key.ENTER,
    "\n": Key.ENTER,
    "\t": Key.TAB,
    "\x7f": Key.BACKSPACE,
    "\x08": Key.BACKSPACE,
}


def decode_keys(data: str) -> list[KeyPress]:
    """Split one read from stdin into key events."""
    keys: list[KeyPress] = []
    i = 0
    while i < len(data):
        ch = data[i]
        if ch == "\x1b":
            seq = data[i:i + 3]
            if seq in _ESCAPE_SEQUENCES:
                keys.append(KeyPress(_ESCAPE_SEQUENCES[seq]))
                i += 3
                continue
            if len(seq) >= 2 and seq[1] in "[O":
                # Unsupported CSI/SS3 sequence (F-keys, Home, ...): skip to its final byte
                j = i + 2
                while j < len(data) and not (data[j].isalpha() or data[j] == "~"):
                    j += 1
                i = j + 1
                continue
            keys.append(KeyPress(Key.ESCAPE))
            i += 1
            continue
        if ch in _CONTROL:
            keys.append(KeyPress(_CONTROL[ch]))
        elif ch.isprintable():
            keys.append(KeyPress.of(ch))
        i += 1
    return keys


@contextmanager
def cbreak_terminal(fd: int | None = None) -> Iterator[int]:
    """Put the terminal in cbreak mode (no echo, no line buffering)."""
    fd = sys.stdin.fileno() if fd is None else fd
    original = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield fd
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, original)


class KeyDecoder:
    """Incremental stdin decoder: keeps partial UTF-8 bytes between reads."""

    def __init__(self):
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="ignore")

    def feed(self, data: bytes) -> list[KeyPress]:
        return decode_keys(self._utf8.decode(data))


def attach_key_reader(
    loop: asyncio.AbstractEventLoop, fd: int, queue: asyncio.Queue,
) -> None:
    """Register a reader that decodes stdin and enqueues KeyPress events."""
    decoder = KeyDecoder()

    def on_readable() -> None:
        try:
            data = os.read(fd, 64)
        except OSError as e:
            logger.error(f"stdin read failed: {e}")
            return
        for key in decoder.feed(data):
            queue.put_nowait(key)

    loop.add_reader(fd, on_readable)


def detach_key_reader(loop: asyncio.AbstractEventLoop, fd: int) -> None:
    loop.remove_reader(fd)
