# rawed/ui/Escapes.py
"""VT100 output commands written by RAWED.

These are the exact byte sequences sent to the terminal. Every other module
builds output from this table so the wire format lives in one place.
"""

ESC = 0x1B

CLEAR_SCREEN = b"\x1b[2J"
CURSOR_HOME = b"\x1b[H"
HIDE_CURSOR = b"\x1b[?25l"
SHOW_CURSOR = b"\x1b[?25h"
ERASE_LINE = b"\x1b[K"  # erase from cursor to end of line
MOVE_TO_FAR_CORNER = b"\x1b[999C\x1b[999B"  # C and B stop at the screen edge
REQUEST_CURSOR_POSITION = b"\x1b[6n"
LINE_BREAK = b"\r\n"  # OPOST is off, so LF alone does not return the carriage


def cursor_position(row: int, col: int) -> bytes:
    """Absolute cursor move. *row* and *col* are 1-based."""
    return b"\x1b[%d;%dH" % (row, col)
