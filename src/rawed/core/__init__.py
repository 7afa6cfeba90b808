# src/rawed/core/__init__.py
"""Public facade for rawed.core: re-export main classes from CamelCase modules.

Keeps Java-like file names (Rawed.py, Document.py, ...),
but provides flat imports for convenience and stability.
"""

from rawed.utils.errors import FatalError  # noqa: F401

from .Document import DocumentLine, load_first_line  # noqa: F401
from .Rawed import CursorPosition, EditorContext, Rawed  # noqa: F401


__all__ = [
    "CursorPosition",
    "DocumentLine",
    "EditorContext",
    "FatalError",
    "Rawed",
    "load_first_line",
]
