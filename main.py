#!/usr/bin/env python3
# /rawed/main.py
"""
RAWED Main Entry Point
======================

This script is the primary entry point for launching the RAWED display tool.
It performs:
1) Environment Loading: reads ~/.config/rawed/.env early (e.g. RAWED_KEYTRACE).
2) Path Setup: ensures the rawed package is importable from a source checkout.
3) Configuration & Logging: loads config and initializes logging.
4) Raw Mode: acquires the terminal for the lifetime of a `with` block, so the
   original terminal attributes come back on every exit path.
5) Application Run: resolves the screen size, loads the optional file and
   runs the editor loop.

Usage:
    python main.py [FILE]

Exit status is 0 after Ctrl+Q and 1 after any fatal error; the error is
printed to stderr once the terminal has been restored.
"""

from __future__ import annotations

import functools
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv

# --- Step 1: Load Environment Variables from the User's Config Directory ---
try:
    load_dotenv(dotenv_path=Path.home() / ".config" / "rawed" / ".env")
except (OSError, RuntimeError):
    # No usable HOME; environment overrides are optional.
    pass

# --- Step 2: Set up the Python Path ---
project_root = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")
if os.path.isdir(project_root) and project_root not in sys.path:
    sys.path.insert(0, project_root)

from rawed.core.Document import load_first_line  # noqa: E402
from rawed.core.Rawed import EditorContext, Rawed  # noqa: E402
from rawed.ui import Escapes  # noqa: E402
from rawed.ui.DrawScreen import DrawScreen  # noqa: E402
from rawed.ui.KeyDecoder import KeyDecoder  # noqa: E402
from rawed.ui.TerminalAppMode import TerminalAppMode  # noqa: E402
from rawed.ui.WindowGeometry import resolve_geometry  # noqa: E402
from rawed.utils.errors import FatalError  # noqa: E402
from rawed.utils.logging_config import setup_logging  # noqa: E402
from rawed.utils.utils import load_config, read_timeout_deciseconds  # noqa: E402

logger = logging.getLogger("rawed")


def _raise_system_exit(signum: int, _frame: Any) -> None:
    """Turn a termination signal into SystemExit so the raw-mode block unwinds."""
    logger.warning("Received signal %d, shutting down.", signum)
    raise SystemExit(1)


def _fd_reader(fd: int) -> Callable[[int], bytes]:
    return functools.partial(os.read, fd)


def _fd_writer(fd: int) -> Callable[[bytes], int]:
    return functools.partial(os.write, fd)


def _install_signal_handlers() -> None:
    # ISIG is off in raw mode, so only signals sent from outside can arrive.
    for name in ("SIGTERM", "SIGHUP"):
        if hasattr(signal, name):
            try:
                signal.signal(getattr(signal, name), _raise_system_exit)
            except (OSError, ValueError):
                logger.debug("Could not install handler for %s.", name)


def run_editor(
    config: dict[str, Any],
    filename: Optional[str],
    stdin_fd: int,
    stdout_fd: int,
    mode: Optional[TerminalAppMode] = None,
) -> None:
    """Run one editing session with the terminal in raw mode.

    Raises:
        FatalError: from any component; the terminal has already been
            restored when it reaches the caller.
    """
    read = _fd_reader(stdin_fd)
    write = _fd_writer(stdout_fd)
    if mode is None:
        mode = TerminalAppMode(stdin_fd, timeout_ds=read_timeout_deciseconds(config))

    with mode:
        geometry = resolve_geometry(read, write, stdout_fd)
        document = load_first_line(filename) if filename else None
        editor = Rawed(
            EditorContext(geometry, document=document),
            KeyDecoder(read),
            DrawScreen(config, write),
            write,
            config,
        )
        editor.run()


def _report_fatal(error: FatalError, stdout_fd: int) -> None:
    """Clear the screen, then print the failing operation to stderr."""
    try:
        _fd_writer(stdout_fd)(Escapes.CLEAR_SCREEN + Escapes.CURSOR_HOME)
    except OSError:
        pass
    logger.critical("Fatal error: %s", error, exc_info=error)
    print(error, file=sys.stderr)


def start(argv: Optional[list[str]] = None) -> int:
    """Loads configuration and logging, then runs the editor. Returns the exit status."""
    argv = sys.argv if argv is None else argv

    # --- Step 3: Configuration and Logging ---
    try:
        config: dict[str, Any] = load_config()
        setup_logging(config)
    except Exception as e:
        print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
        return 1

    logger.info("RAWED starting up...")
    filename = argv[1] if len(argv) > 1 and argv[1] else None
    stdin_fd, stdout_fd = sys.stdin.fileno(), sys.stdout.fileno()

    _install_signal_handlers()
    try:
        run_editor(config, filename, stdin_fd, stdout_fd)
    except FatalError as e:
        _report_fatal(e, stdout_fd)
        return 1

    logger.info("RAWED shut down gracefully.")
    return 0


if __name__ == "__main__":
    sys.exit(start())
