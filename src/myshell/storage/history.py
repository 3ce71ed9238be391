"""Append-only plain-text history log."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)


class HistoryLog:
    """One submitted command line per record, oldest first."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def lines(self) -> Iterator[str]:
        """Yield stored lines from the beginning. A missing log yields nothing."""
        if not self.path.exists():
            return
        with open(self.path, encoding="utf-8", errors="replace") as f:
            for line in f:
                yield line.rstrip("\n")

    def append(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
        logger.debug("Appended to history %s: %s", self.path, line)
