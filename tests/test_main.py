# tests/test_main.py
"""Tests for the entry point: restoring the terminal on every exit path.

`run_editor` is driven with a `TerminalAppMode` built on `FakeTermios`; the
descriptor-level reader and writer are replaced with a scripted reader and a
write sink, and the kernel window size query reports a fixed 5x20 screen.
"""

from __future__ import annotations

import errno
import functools
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

import main
from rawed.ui import Escapes, WindowGeometry
from rawed.ui.TerminalAppMode import TerminalAppMode
from rawed.utils.errors import FatalError
from tests.stubs import FakeTermios, InterruptedTermios, ScriptedReader, WriteSink


@pytest.fixture
def terminal(monkeypatch):
    """Install a fake terminal and return its (reader, sink)."""

    def install(script):
        reader = ScriptedReader(script)
        sink = WriteSink()
        monkeypatch.setattr(main, "_fd_reader", lambda fd: reader)
        monkeypatch.setattr(main, "_fd_writer", lambda fd: sink)
        monkeypatch.setattr(WindowGeometry, "_kernel_size", lambda fd: (5, 20))
        return reader, sink

    return install


@pytest.fixture
def fake_sys(monkeypatch):
    """Replace `main.sys` so `start` sees fixed descriptors."""

    def install(argv):
        namespace = SimpleNamespace(
            argv=argv,
            stdin=SimpleNamespace(fileno=lambda: 0),
            stdout=SimpleNamespace(fileno=lambda: 1),
            stderr=sys.stderr,
        )
        monkeypatch.setattr(main, "sys", namespace)
        monkeypatch.setattr(main, "load_config", lambda: {})
        monkeypatch.setattr(main, "setup_logging", lambda config: None)
        monkeypatch.setattr(main, "_install_signal_handlers", lambda: None)

    return install


def test_quit_restores_terminal(config, terminal) -> None:
    _, sink = terminal([b"\x11"])
    fake = FakeTermios()
    original = fake.tcgetattr(0)

    main.run_editor(config, None, 0, 1, mode=TerminalAppMode(0, tty=fake))

    assert fake.attrs == original
    assert len(fake.set_calls) == 2
    assert sink.calls[-1] == Escapes.CLEAR_SCREEN + Escapes.CURSOR_HOME


def test_fatal_read_error_still_restores_terminal(config, terminal) -> None:
    """A fatal error deep inside the loop restores the terminal before it reaches the caller."""
    terminal([b"\x1b[B", OSError(5, "Input/output error")])
    fake = FakeTermios()
    original = fake.tcgetattr(0)

    with pytest.raises(FatalError) as info:
        main.run_editor(config, None, 0, 1, mode=TerminalAppMode(0, tty=fake))

    assert info.value.operation == "read"
    assert fake.attrs == original
    assert len(fake.set_calls) == 2


def test_missing_file_restores_terminal(config, terminal, tmp_path: Path) -> None:
    _, sink = terminal([])
    fake = FakeTermios()

    with pytest.raises(FatalError) as info:
        main.run_editor(config, str(tmp_path / "nope.txt"), 0, 1, mode=TerminalAppMode(0, tty=fake))

    assert info.value.operation == "fopen"
    assert len(fake.set_calls) == 2
    assert sink.calls == []


def test_geometry_failure_restores_terminal(config, terminal, monkeypatch) -> None:
    terminal([None])
    monkeypatch.setattr(WindowGeometry, "_kernel_size", lambda fd: None)
    fake = FakeTermios()

    with pytest.raises(FatalError) as info:
        main.run_editor(config, None, 0, 1, mode=TerminalAppMode(0, tty=fake))

    assert info.value.operation == "getWindowSize"
    assert len(fake.set_calls) == 2


def test_file_row_is_rendered(config, terminal, tmp_path: Path) -> None:
    path = tmp_path / "doc.txt"
    path.write_bytes(b"hello\r\nworld\n")
    _, sink = terminal([b"\x11"])

    main.run_editor(config, str(path), 0, 1, mode=TerminalAppMode(0, tty=FakeTermios()))

    assert sink.calls[0].startswith(Escapes.HIDE_CURSOR + Escapes.CURSOR_HOME + b"hello\x1b[K")


def test_start_reports_fatal_error_and_exits_1(fake_sys, monkeypatch, capsys) -> None:
    fake_sys(["rawed"])
    sink = WriteSink()
    monkeypatch.setattr(main, "_fd_writer", lambda fd: sink)

    def failing_run(config, filename, stdin_fd, stdout_fd):
        raise FatalError("tcgetattr", OSError(25, "Inappropriate ioctl for device"))

    monkeypatch.setattr(main, "run_editor", failing_run)

    assert main.start() == 1
    assert sink.calls == [Escapes.CLEAR_SCREEN + Escapes.CURSOR_HOME]
    assert "tcgetattr: Inappropriate ioctl for device" in capsys.readouterr().err


def test_start_returns_0_after_quit(fake_sys, monkeypatch) -> None:
    fake_sys(["rawed", "notes.txt"])
    seen = {}

    def fake_run(config, filename, stdin_fd, stdout_fd):
        seen.update(filename=filename, fds=(stdin_fd, stdout_fd))

    monkeypatch.setattr(main, "run_editor", fake_run)

    assert main.start() == 0
    assert seen == {"filename": "notes.txt", "fds": (0, 1)}


def test_start_fails_cleanly_when_config_breaks(fake_sys, monkeypatch, capsys) -> None:
    fake_sys(["rawed"])

    def broken():
        raise RuntimeError("boom")

    monkeypatch.setattr(main, "load_config", broken)

    assert main.start() == 1
    assert "Could not initialize configuration" in capsys.readouterr().err


def test_signal_becomes_system_exit() -> None:
    with pytest.raises(SystemExit):
        main._raise_system_exit(15, None)


def test_signal_during_raw_mode_setup_restores_terminal(config, terminal) -> None:
    terminal([b"\x11"])
    fake = InterruptedTermios()
    original = fake.tcgetattr(0)

    with pytest.raises(SystemExit):
        main.run_editor(config, None, 0, 1, mode=TerminalAppMode(0, tty=fake))

    assert len(fake.set_calls) == 2
    assert fake.attrs == original


def test_start_reports_write_failure_and_exits_1(fake_sys, monkeypatch, capsys) -> None:
    """A failing terminal write ends on the fatal path, not in a traceback."""
    fake_sys(["rawed"])
    fake = FakeTermios()
    original = fake.tcgetattr(0)

    def broken_write(data: bytes) -> int:
        raise OSError(errno.EIO, "Input/output error")

    monkeypatch.setattr(main, "_fd_reader", lambda fd: ScriptedReader([b"\x11"]))
    monkeypatch.setattr(main, "_fd_writer", lambda fd: broken_write)
    monkeypatch.setattr(WindowGeometry, "_kernel_size", lambda fd: (5, 20))
    monkeypatch.setattr(main, "TerminalAppMode", functools.partial(TerminalAppMode, tty=fake))

    assert main.start() == 1
    assert fake.attrs == original
    assert "write: Input/output error" in capsys.readouterr().err
