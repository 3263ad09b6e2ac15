"""Console and structured file logging for the sync tool."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any


_LOGGER_NAME = "lighter_libsync"

_RESET = "\033[0m"
_LEVEL_COLORS = {
    logging.DEBUG: "",
    logging.INFO: "\033[0;32m",
    logging.WARNING: "\033[1;33m",
    logging.ERROR: "\033[0;31m",
    logging.CRITICAL: "\033[0;31m",
}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        if hasattr(record, "event"):
            payload["event"] = getattr(record, "event")
        return json.dumps(payload, ensure_ascii=True)


class ColorFormatter(logging.Formatter):
    """Wraps each console line in the ANSI colour for its level."""

    def __init__(self, fmt: str = "%(message)s", color: bool = True) -> None:
        super().__init__(fmt)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        code = _LEVEL_COLORS.get(record.levelno, "")
        if not self.color or not code:
            return line
        return f"{code}{line}{_RESET}"


def _stream_supports_color(stream: IO[str]) -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def configure_logging(
    verbose: bool = False,
    log_file: Path | None = None,
    color: bool | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    stream = stream or sys.stderr
    use_color = _stream_supports_color(stream) if color is None else color
    console = logging.StreamHandler(stream)
    console.setFormatter(ColorFormatter(color=use_color))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(str(log_file), encoding="utf-8")
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

    logger.debug("logging configured", extra={"event": "logging_configured"})
    return logger


def reset_logging() -> None:
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def get_logger() -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME)
