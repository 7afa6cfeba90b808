# rawed/core/Rawed.py
"""rawed.core.Rawed.py
============================
Rawed: the editor controller.

The controller owns the session state in a single :class:`EditorContext`
(screen geometry, cursor position, loaded document) and runs the
refresh/input loop:

    render frame -> read one logical key -> dispatch -> repeat

until the quit key is pressed. Keys are dispatched through
:class:`rawed.ui.KeyBinder.KeyBinder`; movement is clamped to the screen
(no wraparound, no scrolling). Terminal setup and teardown are not done
here: ``main.py`` runs the controller inside
:class:`rawed.ui.TerminalAppMode.TerminalAppMode`, and any
:class:`rawed.utils.errors.FatalError` raised while running simply propagates.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from rawed.core.Document import DocumentLine
from rawed.ui import Escapes
from rawed.ui.DrawScreen import DrawScreen
from rawed.ui.KeyBinder import KeyBinder
from rawed.ui.KeyDecoder import Key, KeyDecoder, LogicalKey
from rawed.ui.WindowGeometry import ScreenGeometry
from rawed.utils.errors import FatalError

logger = logging.getLogger("rawed")


@dataclass
class CursorPosition:
    """0-based cursor cell; x is the column, y the row."""

    x: int = 0
    y: int = 0


@dataclass
class EditorContext:
    """Everything the controller and renderer need about the session."""

    geometry: ScreenGeometry
    cursor: CursorPosition = field(default_factory=CursorPosition)
    document: Optional[DocumentLine] = None


class Rawed:
    """Editor controller: owns the context and drives the main loop.

    Attributes:
        context (EditorContext): Geometry, cursor and document.
        decoder (KeyDecoder): Source of logical keys.
        drawer (DrawScreen): Frame renderer.
        keybinder (KeyBinder): Logical key -> action dispatch.
        running (bool): True while the loop is in the Running state.
    """

    def __init__(
        self,
        context: EditorContext,
        decoder: KeyDecoder,
        drawer: DrawScreen,
        write: Callable[[bytes], int],
        config: Optional[dict[str, Any]] = None,
    ) -> None:
        self.context = context
        self.decoder = decoder
        self.drawer = drawer
        self.write = write
        self.config = config or {}
        self.running = True
        self.keybinder = KeyBinder(self, self.config)

    # ---------------------- Main loop --------------------
    def run(self) -> None:
        """Refresh, read, dispatch until the quit key is pressed."""
        logger.info(
            "Editor main loop started (%dx%d).",
            self.context.geometry.rows,
            self.context.geometry.cols,
        )
        while self.running:
            self.drawer.refresh(self.context)
            self.process_keypress(self.decoder.read_key())
        logger.info("Editor main loop finished.")

    def process_keypress(self, key: LogicalKey) -> None:
        """Dispatch one logical key; unbound keys are ignored."""
        self.keybinder.handle_input(key)

    # ---------------------- Cursor movement --------------------
    def move_cursor(self, key: LogicalKey) -> None:
        """Move one cell in the direction of an arrow key, stopping at the edges."""
        cursor = self.context.cursor
        geometry = self.context.geometry
        if key == Key.ARROW_LEFT:
            if cursor.x != 0:
                cursor.x -= 1
        elif key == Key.ARROW_RIGHT:
            if cursor.x != geometry.cols - 1:
                cursor.x += 1
        elif key == Key.ARROW_UP:
            if cursor.y != 0:
                cursor.y -= 1
        elif key == Key.ARROW_DOWN:
            if cursor.y != geometry.rows - 1:
                cursor.y += 1

    def handle_up(self) -> None:
        self.move_cursor(Key.ARROW_UP)

    def handle_down(self) -> None:
        self.move_cursor(Key.ARROW_DOWN)

    def handle_left(self) -> None:
        self.move_cursor(Key.ARROW_LEFT)

    def handle_right(self) -> None:
        self.move_cursor(Key.ARROW_RIGHT)

    def handle_home(self) -> None:
        self.context.cursor.x = 0

    def handle_end(self) -> None:
        self.context.cursor.x = self.context.geometry.cols - 1

    def handle_page_up(self) -> None:
        for _ in range(self.context.geometry.rows):
            self.move_cursor(Key.ARROW_UP)

    def handle_page_down(self) -> None:
        for _ in range(self.context.geometry.rows):
            self.move_cursor(Key.ARROW_DOWN)

    # ---------------------- Termination --------------------
    def quit(self) -> None:
        """Clear the screen, home the cursor and leave the Running state."""
        logger.info("Quit requested.")
        try:
            self.write(Escapes.CLEAR_SCREEN + Escapes.CURSOR_HOME)
        except OSError as e:
            raise FatalError("write", e) from e
        self.running = False
