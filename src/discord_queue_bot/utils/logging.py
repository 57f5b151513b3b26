"""Console logging formatter used by ``logging_config.json``."""

from __future__ import annotations

import logging
import os
import sys
from typing import IO


class ColoredFormatter(logging.Formatter):
    """Colors the level name and dims the logger name on interactive consoles.

    Plain output is produced when ``NO_COLOR`` is set or the target stream is
    not a TTY.
    """

    LEVEL_COLORS: dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    DIM = "\033[2m"
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        *,
        stream: IO[str] | None = None,
    ) -> None:
        super().__init__(fmt, datefmt)
        self._stream = stream

    def use_color(self) -> bool:
        if os.environ.get("NO_COLOR") is not None:
            return False
        stream = self._stream or sys.stderr
        isatty = getattr(stream, "isatty", None)
        return bool(isatty and isatty())

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color():
            return super().format(record)

        record = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelno, "")
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        record.name = f"{self.DIM}{record.name}{self.RESET}"
        return super().format(record)
