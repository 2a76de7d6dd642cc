"""Buffered capture of disc-reading diagnostics.

Messages logged while reading the disc are noise on a successful run, but
they are usually the only clue when a damaged disc fails.  They are held
in memory and only shown when the run goes wrong (or with ``--verbose``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

_LEVEL_NAMES = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "ERROR",
}

REPORT_HEADER = "Messages reported while reading the disc:"


def level_name(levelno: int) -> str:
    return _LEVEL_NAMES.get(levelno, "unknown")


class DiagnosticBuffer(logging.Handler):
    """Logging handler that keeps ``(level, message)`` pairs in memory."""

    def __init__(self, level: int = logging.DEBUG) -> None:
        super().__init__(level)
        self.messages: list[tuple[str, str]] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.messages.append((level_name(record.levelno), record.getMessage()))
        except Exception:
            self.handleError(record)

    def lines(self) -> list[str]:
        return [f"[{lvl}] {msg}" for lvl, msg in self.messages]

    def __len__(self) -> int:
        return len(self.messages)


@contextmanager
def capture_diagnostics(logger_name: str = "dvdchap", level: int = logging.DEBUG) -> Iterator[DiagnosticBuffer]:
    """Attach a :class:`DiagnosticBuffer` to *logger_name* for the block."""
    logger = logging.getLogger(logger_name)
    buffer = DiagnosticBuffer(level)
    previous_level = logger.level
    logger.addHandler(buffer)
    if logger.getEffectiveLevel() > level:
        logger.setLevel(level)
    try:
        yield buffer
    finally:
        logger.removeHandler(buffer)
        logger.setLevel(previous_level)
