# rawed/ui/WindowGeometry.py
"""WindowGeometry.py
=======================
Discovers how many rows and columns the terminal offers.

The primary path asks the kernel (``TIOCGWINSZ`` through
``os.get_terminal_size``). Some environments cannot answer that, or answer
with zero columns; the fallback then asks the terminal itself: the cursor is
pushed to the bottom-right corner and a Device Status Report (``ESC[6n``)
makes the terminal reply ``ESC[<rows>;<cols>R``. The reply is read one byte
at a time into a bounded buffer, so a silent or chatty peer can never make
the read run away.

The fallback leaves the cursor in the corner. Nothing is drawn before the
first frame, and every frame starts by homing the cursor.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from dataclasses import dataclass
from typing import Callable, Optional

from rawed.ui import Escapes
from rawed.utils.errors import FatalError

logger = logging.getLogger("rawed")

# Longest cursor position reply accepted, without the final R.
REPLY_LIMIT = 31

_REPORT_RE = re.compile(rb"(\d+);(\d+)")

Reader = Callable[[int], bytes]
Writer = Callable[[bytes], int]


@dataclass(frozen=True)
class ScreenGeometry:
    """Usable screen size. Both dimensions are positive."""

    rows: int
    cols: int

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"Screen geometry must be positive, got {self.rows}x{self.cols}")


def parse_cursor_report(reply: bytes) -> Optional[tuple[int, int]]:
    """Parse a cursor position report body, ``ESC[<row>;<col>`` (``R`` already stripped).

    Returns ``(row, col)``, or None when the prefix is missing or the two
    numbers cannot be read.
    """
    if len(reply) < 2 or reply[0] != Escapes.ESC or reply[1:2] != b"[":
        return None
    match = _REPORT_RE.match(reply, 2)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def query_cursor_position(read: Reader, write: Writer) -> Optional[tuple[int, int]]:
    """Ask the terminal where the cursor is. Returns ``(row, col)`` or None."""
    if write(Escapes.REQUEST_CURSOR_POSITION) != len(Escapes.REQUEST_CURSOR_POSITION):
        return None

    reply = bytearray()
    while len(reply) < REPLY_LIMIT:
        byte = read(1)
        if not byte or byte == b"R":
            break
        reply += byte

    logger.debug("Cursor position reply: %r", bytes(reply))
    return parse_cursor_report(bytes(reply))


def _kernel_size(fd: int) -> Optional[tuple[int, int]]:
    try:
        size = os.get_terminal_size(fd)
    except OSError as e:
        logger.debug("TIOCGWINSZ unavailable on fd %d: %s", fd, e)
        return None
    if size.columns == 0 or size.lines == 0:
        return None
    return size.lines, size.columns


def resolve_geometry(
    read: Reader,
    write: Writer,
    out_fd: Optional[int] = None,
    query_kernel: Optional[Callable[[int], Optional[tuple[int, int]]]] = None,
) -> ScreenGeometry:
    """Determine the screen size, falling back to a cursor position query.

    Raises:
        FatalError: ``getWindowSize`` when neither path yields a usable size.
    """
    fd = sys.stdout.fileno() if out_fd is None else out_fd

    size = (query_kernel or _kernel_size)(fd)
    if size is not None:
        rows, cols = size
        logger.info("Screen geometry from kernel: %dx%d", rows, cols)
        return ScreenGeometry(rows, cols)

    logger.info("Falling back to cursor position report for screen geometry.")
    try:
        if write(Escapes.MOVE_TO_FAR_CORNER) != len(Escapes.MOVE_TO_FAR_CORNER):
            raise FatalError("getWindowSize")
        size = query_cursor_position(read, write)
    except OSError as e:
        raise FatalError("getWindowSize", e) from e

    if size is None or size[0] <= 0 or size[1] <= 0:
        raise FatalError("getWindowSize")
    rows, cols = size
    logger.info("Screen geometry from cursor report: %dx%d", rows, cols)
    return ScreenGeometry(rows, cols)
