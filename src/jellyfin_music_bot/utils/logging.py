"""Colored logging formatter for console output."""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name and dims the logger name.

    Colors are disabled when the ``NO_COLOR`` environment variable is set or
    when the target stream is not a TTY (e.g. redirected to a file or a
    container log driver).
    """

    LEVEL_COLORS: dict[int, str] = {
        logging.DEBUG: "\033[36m",  # cyan
        logging.INFO: "\033[32m",  # green
        logging.WARNING: "\033[33m",  # yellow
        logging.ERROR: "\033[31m",  # red
        logging.CRITICAL: "\033[1;31m",  # bold red
    }
    DIM = "\033[2m"
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        *,
        stream: TextIO | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)  # type: ignore[arg-type]
        self._stream = stream

    def use_color(self) -> bool:
        if "NO_COLOR" in os.environ:
            return False
        stream = self._stream or sys.stderr
        isatty = getattr(stream, "isatty", None)
        return bool(isatty and isatty())

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color():
            return super().format(record)

        colored = logging.makeLogRecord(record.__dict__)
        level_color = self.LEVEL_COLORS.get(record.levelno, "")
        colored.levelname = f"{level_color}{record.levelname}{self.RESET}"
        colored.name = f"{self.DIM}{record.name}{self.RESET}"
        return super().format(colored)
