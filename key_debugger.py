# key_debugger.py
"""Raw key debugger.

Puts the terminal in raw mode and prints the logical key decoded for every
keypress, which helps when a terminal emulator sends an unexpected sequence
for Home, End or the arrows. Press 'q' to quit.
"""

import functools
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "src"))

from rawed.ui.KeyDecoder import KeyDecoder, key_name  # noqa: E402
from rawed.ui.TerminalAppMode import TerminalAppMode  # noqa: E402
from rawed.utils.errors import FatalError  # noqa: E402


def describe(key: int) -> str:
    """One report line for a decoded key."""
    return f"{'Name:':<8} {key_name(key):<14} {'Value:':<8} {key:<6} hex: {key:#x}"


def main(stdin_fd: int, stdout_fd: int) -> None:
    decoder = KeyDecoder(functools.partial(os.read, stdin_fd))
    with TerminalAppMode(stdin_fd):
        # OPOST is off: every line needs an explicit carriage return.
        os.write(stdout_fd, b"Raw key debugger. Press keys to see their codes, 'q' to quit.\r\n")
        while True:
            key = decoder.read_key()
            if key == ord("q"):
                break
            os.write(stdout_fd, describe(key).encode("utf-8") + b"\r\n")


if __name__ == "__main__":
    try:
        main(sys.stdin.fileno(), sys.stdout.fileno())
        print("Debugger finished.")
    except FatalError as e:
        print(f"An error occurred: {e}", file=sys.stderr)
        sys.exit(1)
