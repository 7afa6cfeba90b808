# rawed/utils/errors.py
"""Error type shared by every terminal-facing component.

RAWED knows two kinds of failure. Expected conditions (a read timeout, a
truncated escape sequence) are resolved where they happen and never leave
the component. Everything else is a :class:`FatalError`: it propagates to
``main.py``, which lets the raw-mode context restore the terminal, clears
the screen and exits with status 1.
"""

from __future__ import annotations

from typing import Optional


class FatalError(Exception):
    """An unrecoverable failure of a named terminal or file operation.

    Attributes:
        operation: Short name of the failing call (``"tcgetattr"``,
            ``"tcsetattr"``, ``"read"``, ``"write"``, ``"fopen"``,
            ``"getWindowSize"``).
        cause: The underlying exception, when there is one.
    """

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(self._format())

    def _format(self) -> str:
        if self.cause is None:
            return self.operation
        if isinstance(self.cause, OSError) and self.cause.strerror:
            return f"{self.operation}: {self.cause.strerror}"
        # termios.error carries (errno, message) without being an OSError
        args = getattr(self.cause, "args", ())
        if len(args) == 2 and isinstance(args[0], int) and isinstance(args[1], str):
            return f"{self.operation}: {args[1]}"
        return f"{self.operation}: {self.cause}"
