# rawed/ui/KeyDecoder.py
"""KeyDecoder.py
==================
Description:
-----------------------
Turns the raw byte stream of a terminal in raw mode into logical keys.

A logical key is an ``int``. Ordinary input bytes (printable characters and
control bytes such as Ctrl+Q = 0x11) come back as their byte value. Keys that
terminals send as escape sequences come back as :class:`Key` members, which
start at 1000 so they never collide with a byte value.

Recognised sequences (the leading ESC is implied):

    CSI letter  ``[A`` up, ``[B`` down, ``[C`` right, ``[D`` left,
                ``[H`` home, ``[F`` end
    CSI tilde   ``[1~`` home, ``[3~`` delete, ``[4~`` end, ``[5~`` page up,
                ``[6~`` page down, ``[7~`` home, ``[8~`` end
    SS3         ``OH`` home, ``OF`` end

Home and End have several encodings because terminal emulators disagree;
all of them decode to the same key.

The decoder is a small state machine (START, SAW_ESCAPE, SAW_INTRODUCER,
SAW_DIGIT). A lone ESC press, a sequence cut short by the read timeout and
any unknown sequence all resolve to :attr:`Key.ESCAPE`; decoding never
raises for malformed input.
"""

from __future__ import annotations

import enum
import errno
import functools
import logging
import os
import sys
from typing import Callable, Optional

from rawed.utils.errors import FatalError
from rawed.utils.logging_config import KEY_LOGGER

LogicalKey = int
Reader = Callable[[int], bytes]

# errno values that only mean "nothing to read yet".
_RETRY_ERRNOS = {errno.EAGAIN, errno.EWOULDBLOCK, errno.EINTR}


class Key(enum.IntEnum):
    """Logical keys that do not correspond to a single input byte."""

    ESCAPE = 0x1B
    ARROW_LEFT = 1000
    ARROW_RIGHT = 1001
    ARROW_UP = 1002
    ARROW_DOWN = 1003
    DEL = 1004
    HOME = 1005
    END = 1006
    PAGE_UP = 1007
    PAGE_DOWN = 1008


class State(enum.Enum):
    START = "start"
    SAW_ESCAPE = "saw_escape"
    SAW_INTRODUCER = "saw_introducer"
    SAW_DIGIT = "saw_digit"


# ESC [ <letter>
CSI_LETTER_MAP: dict[int, Key] = {
    ord("A"): Key.ARROW_UP,
    ord("B"): Key.ARROW_DOWN,
    ord("C"): Key.ARROW_RIGHT,
    ord("D"): Key.ARROW_LEFT,
    ord("H"): Key.HOME,
    ord("F"): Key.END,
}

# ESC [ <digit> ~
CSI_TILDE_MAP: dict[int, Key] = {
    ord("1"): Key.HOME,
    ord("3"): Key.DEL,
    ord("4"): Key.END,
    ord("5"): Key.PAGE_UP,
    ord("6"): Key.PAGE_DOWN,
    ord("7"): Key.HOME,
    ord("8"): Key.END,
}

# ESC O <letter>
SS3_LETTER_MAP: dict[int, Key] = {
    ord("H"): Key.HOME,
    ord("F"): Key.END,
}

CSI = ord("[")
SS3 = ord("O")
TILDE = ord("~")


def ctrl_key(ch: str) -> int:
    """Byte produced by Ctrl+<ch> (``ctrl_key("q") == 0x11``)."""
    return ord(ch) & 0x1F


def is_control(key: LogicalKey) -> bool:
    """True for ASCII control bytes (0x00-0x1F and DEL)."""
    return 0 <= key < 0x20 or key == 0x7F


def key_name(key: LogicalKey) -> str:
    """Human-readable name, for logs and the key debugger."""
    try:
        return Key(key).name
    except ValueError:
        pass
    if is_control(key):
        return f"CTRL+{chr((key | 0x40) & 0x7F)}" if key != 0x7F else "BACKSPACE"
    if 0x20 <= key < 0x7F:
        return repr(chr(key))
    return f"0x{key:02x}"


class KeyDecoder:
    """Reads one logical key at a time from a raw-mode terminal.

    Args:
        read: Callable returning up to ``n`` bytes, or ``b""`` when the
            terminal read timeout expired with no input. Defaults to
            ``os.read`` on stdin.
    """

    def __init__(self, read: Optional[Reader] = None) -> None:
        if read is None:
            read = functools.partial(os.read, sys.stdin.fileno())
        self._read = read

    def _read_byte(self) -> Optional[int]:
        """One timed read. Returns the byte, or None if nothing arrived in time."""
        try:
            data = self._read(1)
        except OSError as e:
            if e.errno in _RETRY_ERRNOS:
                return None
            raise FatalError("read", e) from e
        return data[0] if data else None

    def _wait_byte(self) -> int:
        """Block until a byte arrives, retrying across read timeouts."""
        while True:
            byte = self._read_byte()
            if byte is not None:
                return byte

    def read_key(self) -> LogicalKey:
        """Wait for a keypress and return it as a logical key."""
        key = self._decode(self._wait_byte())
        KEY_LOGGER.debug("key %s (%d)", key_name(key), key)
        return key

    def _decode(self, first: int) -> LogicalKey:
        state = State.START
        introducer = 0
        digit = 0
        byte: Optional[int] = first

        while True:
            if state is State.START:
                if byte != Key.ESCAPE:
                    return byte
                state = State.SAW_ESCAPE
                continue

            byte = self._read_byte()
            if byte is None:
                return Key.ESCAPE

            if state is State.SAW_ESCAPE:
                introducer = byte
                state = State.SAW_INTRODUCER

            elif state is State.SAW_INTRODUCER:
                if introducer == CSI:
                    if ord("0") <= byte <= ord("9"):
                        digit = byte
                        state = State.SAW_DIGIT
                        continue
                    return CSI_LETTER_MAP.get(byte, Key.ESCAPE)
                if introducer == SS3:
                    return SS3_LETTER_MAP.get(byte, Key.ESCAPE)
                return Key.ESCAPE

            elif state is State.SAW_DIGIT:
                if byte != TILDE:
                    return Key.ESCAPE
                return CSI_TILDE_MAP.get(digit, Key.ESCAPE)
