"""Logging utilities for vtgen commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .models import Diagnostic

_LOGGER_NAME = "vtgen"
_CONSOLE_FORMAT = "[vtgen] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the vtgen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the vtgen logger with console output and an optional file sink.

    ``quiet`` limits the console to warnings and errors (stale files kept,
    declaration diagnostics) while the file sink still records progress.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.WARNING if quiet else level)
    stream_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def log_diagnostics(diagnostics: Iterable[Diagnostic], logger: logging.Logger | None = None) -> int:
    """Log each diagnostic in ``path:line:col: error ID: message`` form.

    Records carry the diagnostic id as ``diagnostic_id``. Returns the number
    of diagnostics logged.
    """
    target = logger or get_logger("diagnostics")
    count = 0
    for diagnostic in diagnostics:
        target.error("%s", diagnostic.format(), extra={"diagnostic_id": diagnostic.id})
        count += 1
    return count


__all__ = ["configure_logging", "get_logger", "log_diagnostics"]
