# rawed/core/Document.py
"""Single-line document loaded from the command-line file argument."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from rawed.utils.errors import FatalError

logger = logging.getLogger("rawed")


@dataclass(frozen=True)
class DocumentLine:
    """One row of text as raw bytes, without its line terminator."""

    chars: bytes

    @property
    def size(self) -> int:
        return len(self.chars)


def load_first_line(path: Union[str, Path]) -> Optional[DocumentLine]:
    """Read the first line of *path*, stripped of trailing ``\\n``/``\\r`` bytes.

    Returns None for an empty file.

    Raises:
        FatalError: ``fopen`` if the file cannot be opened or read.
    """
    try:
        with open(path, "rb") as fp:
            line = fp.readline()
    except OSError as e:
        raise FatalError("fopen", e) from e

    if not line:
        logger.info("Opened empty file %s", path)
        return None

    row = DocumentLine(line.rstrip(b"\r\n"))
    logger.info("Loaded first line of %s (%d bytes)", path, row.size)
    return row
