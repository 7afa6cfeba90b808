# tests/conftest.py
"""Pytest configuration with shared fixtures for the RAWED tests."""

from __future__ import annotations

import logging
from typing import Any, Callable

import pytest

from rawed.core.Rawed import CursorPosition, EditorContext, Rawed
from rawed.ui.DrawScreen import DrawScreen
from rawed.ui.KeyDecoder import KeyDecoder
from rawed.ui.WindowGeometry import ScreenGeometry
from rawed.utils.utils import DEFAULT_CONFIG, deep_merge
from tests.stubs import FakeTermios, ScriptedReader, WriteSink


@pytest.fixture(autouse=True)
def restore_root_logging() -> Any:
    """Keep `setup_logging` calls from leaking handlers between tests."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    root.handlers = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def config() -> dict[str, Any]:
    """Embedded defaults with a fixed banner, independent of the user's files."""
    return deep_merge(DEFAULT_CONFIG, {"editor": {"banner": "Rawed editor -- version 0.0.1"}})


@pytest.fixture
def fake_termios() -> FakeTermios:
    return FakeTermios()


@pytest.fixture
def sink() -> WriteSink:
    return WriteSink()


@pytest.fixture
def make_context() -> Callable[..., EditorContext]:
    """Factory: `make_context(rows, cols, x=0, y=0, document=None)`."""

    def _make(rows: int = 24, cols: int = 80, x: int = 0, y: int = 0, document=None) -> EditorContext:
        return EditorContext(ScreenGeometry(rows, cols), CursorPosition(x, y), document)

    return _make


@pytest.fixture
def make_editor(config, sink, make_context) -> Callable[..., Rawed]:
    """Factory building a controller wired to a scripted reader and a write sink."""

    def _make(script=(), rows: int = 24, cols: int = 80, x: int = 0, y: int = 0, document=None) -> Rawed:
        return Rawed(
            make_context(rows, cols, x, y, document),
            KeyDecoder(ScriptedReader(script)),
            DrawScreen(config, sink),
            sink,
            config,
        )

    return _make
