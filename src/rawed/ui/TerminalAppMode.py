# rawed/ui/TerminalAppMode.py
from __future__ import annotations

import logging
import sys
import termios
from types import ModuleType
from typing import Any, Optional

from rawed.utils.errors import FatalError


# Positions inside the list returned by termios.tcgetattr().
IFLAG, OFLAG, CFLAG, LFLAG, CC = 0, 1, 2, 3, 6


class TerminalAppMode:
    """
    Put the terminal into raw mode for the lifetime of a ``with`` block:

    - no break-triggered SIGINT, parity checking, 8th-bit stripping,
      XON/XOFF flow control or CR-to-NL translation on input;
    - no output post-processing (``\\n`` no longer implies ``\\r``);
    - no echo, canonical line buffering, extended input processing or
      signal-generating control characters;
    - 8-bit characters;
    - ``read()`` returns as soon as any byte arrives, or empty-handed after
      ``timeout_ds`` tenths of a second.

    The original attributes are captured on entry and re-applied on exit,
    whichever way the block is left. Pending unread input is discarded at
    both switches (TCSAFLUSH).

    Always pair `enter()` with `exit()` (try/finally), or use the context
    manager.
    """

    def __init__(
        self,
        fd: Optional[int] = None,
        timeout_ds: int = 1,
        tty: ModuleType = termios,
    ) -> None:
        self.fd: int = sys.stdin.fileno() if fd is None else fd
        self.timeout_ds = timeout_ds
        self._tty = tty
        self._saved: Optional[list[Any]] = None
        self._entered: bool = False

    def __enter__(self) -> "TerminalAppMode":
        self.enter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.exit()

    @property
    def active(self) -> bool:
        return self._entered

    def enter(self) -> None:
        try:
            self._saved = self._tty.tcgetattr(self.fd)
        except (self._tty.error, OSError) as e:
            raise FatalError("tcgetattr", e) from e

        raw = self.make_raw(self._saved)
        # Marked before the apply: once raw attributes may be in effect,
        # exit() must be able to undo them.
        self._entered = True
        try:
            self._tty.tcsetattr(self.fd, self._tty.TCSAFLUSH, raw)
        except (self._tty.error, OSError) as e:
            self._entered = False
            raise FatalError("tcsetattr", e) from e
        except BaseException:
            # e.g. SystemExit from a signal handler, raised after the apply
            self.exit()
            raise

        logging.debug(
            "TerminalAppMode: entered raw mode on fd %d (VTIME=%d).",
            self.fd,
            self.timeout_ds,
        )

    def exit(self) -> None:
        if not self._entered:
            return
        # Cleared first: a failed restore must not be retried by an outer handler.
        self._entered = False

        try:
            self._tty.tcsetattr(self.fd, self._tty.TCSAFLUSH, self._saved)
        except (self._tty.error, OSError) as e:
            raise FatalError("tcsetattr", e) from e

        logging.debug("TerminalAppMode: exited (restored terminal modes).")

    # ── helpers ───────────────────────────────────────────────────────────────

    def make_raw(self, attrs: list[Any]) -> list[Any]:
        """Return a raw-mode copy of *attrs*; the captured list is left untouched."""
        t = self._tty
        raw = list(attrs)
        raw[CC] = list(attrs[CC])

        raw[IFLAG] &= ~(t.BRKINT | t.ICRNL | t.INPCK | t.ISTRIP | t.IXON)
        raw[OFLAG] &= ~t.OPOST
        raw[CFLAG] |= t.CS8
        raw[LFLAG] &= ~(t.ECHO | t.ICANON | t.IEXTEN | t.ISIG)

        raw[CC][t.VMIN] = 0
        raw[CC][t.VTIME] = self.timeout_ds
        return raw
