# rawed/ui/DrawScreen.py
"""DrawScreen.py
========================
DrawScreen renders the RAWED screen as one VT100 frame per refresh cycle.

Every refresh redraws the whole screen. The frame is accumulated in an
:class:`AppendBuffer` and handed to the terminal in a single write, so the
terminal never shows a half-drawn screen, even over slow links.

Frame layout:

- hide the cursor and move it home;
- one segment per screen row: the document row (truncated to the screen
  width, never wrapped), the centered welcome banner on the banner row of an
  empty document, or the row marker ``~``; each segment ends with
  erase-to-end-of-line, and all but the last with ``\\r\\n``;
- move the cursor to its position and show it again.
"""

import logging
import os
import sys
from typing import TYPE_CHECKING, Any, Callable, Optional

from rawed.ui import Escapes
from rawed.utils.errors import FatalError
from rawed.utils.utils import DEFAULT_CONFIG

if TYPE_CHECKING:
    from rawed.core.Rawed import EditorContext

Writer = Callable[[bytes], int]


class AppendBuffer:
    """Growable byte buffer holding a single frame."""

    __slots__ = ("_buf",)

    def __init__(self) -> None:
        self._buf = bytearray()

    def append(self, data: bytes) -> None:
        self._buf += data

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    def __bytes__(self) -> bytes:
        return self.getvalue()

    def __len__(self) -> int:
        return len(self._buf)


## ================= class DrawScreen ==============================
class DrawScreen:
    """Builds and flushes full-screen frames.

    Attributes:
        banner (bytes): Welcome text shown on an empty document.
        row_marker (bytes): Glyph drawn at the start of rows past the document.
        write (Callable): Output function; receives the whole frame at once
            and returns the number of bytes written.
    """

    def __init__(self, config: Optional[dict[str, Any]] = None, write: Optional[Writer] = None) -> None:
        editor_config = dict(DEFAULT_CONFIG["editor"])
        editor_config.update((config or {}).get("editor", {}))

        self.banner: bytes = str(editor_config["banner"]).encode("utf-8")
        self.row_marker: bytes = str(editor_config["row_marker"]).encode("utf-8") or b"~"
        if write is None:
            fd = sys.stdout.fileno()
            write = lambda data: os.write(fd, data)  # noqa: E731
        self.write = write

    @staticmethod
    def banner_row(rows: int) -> int:
        """Screen row that carries the welcome banner."""
        return rows // 3

    def _draw_banner(self, ab: AppendBuffer, cols: int) -> None:
        """Centered banner, clipped to *cols*; the marker glyph eats its own width of padding."""
        # Clip on a character boundary so no partial UTF-8 sequence is sent.
        banner = self.banner[:cols].decode("utf-8", "ignore").encode("utf-8")
        padding = (cols - len(banner)) // 2
        if padding and padding >= len(self.row_marker):
            ab.append(self.row_marker)
            padding -= len(self.row_marker)
        ab.append(b" " * padding)
        ab.append(banner)

    def _draw_rows(self, ab: AppendBuffer, context: "EditorContext") -> None:
        rows, cols = context.geometry.rows, context.geometry.cols
        document_rows = [context.document] if context.document is not None else []
        banner_y = self.banner_row(rows)

        for y in range(rows):
            if y < len(document_rows):
                ab.append(document_rows[y].chars[:cols])
            elif not document_rows and y == banner_y:
                self._draw_banner(ab, cols)
            else:
                ab.append(self.row_marker)

            ab.append(Escapes.ERASE_LINE)
            if y < rows - 1:
                ab.append(Escapes.LINE_BREAK)

    def build_frame(self, context: "EditorContext") -> bytes:
        """Return the complete byte sequence for one refresh of *context*."""
        ab = AppendBuffer()
        ab.append(Escapes.HIDE_CURSOR)
        ab.append(Escapes.CURSOR_HOME)

        self._draw_rows(ab, context)

        cursor = context.cursor
        ab.append(Escapes.cursor_position(cursor.y + 1, cursor.x + 1))
        ab.append(Escapes.SHOW_CURSOR)
        return ab.getvalue()

    def refresh(self, context: "EditorContext") -> None:
        """Draw the screen: one frame, one write."""
        frame = self.build_frame(context)
        try:
            written = self.write(frame)
        except OSError as e:
            raise FatalError("write", e) from e
        if written is not None and written != len(frame):
            logging.warning("DrawScreen: short write, %d of %d bytes.", written, len(frame))
