"""Logging helpers shared by the tspress CLI, orchestrator and service."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "tspress"
_CONSOLE_FORMAT = "[tspress] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger nested under ``tspress`` (``tspress.<name>``)."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def _level_for(verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach console (and optionally file) handlers to the tspress logger.

    ``verbose`` wins over ``quiet`` when both are set. Existing handlers are
    replaced so repeated CLI invocations in one process do not duplicate output.
    """
    level = _level_for(verbose, quiet)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


__all__ = ["configure_logging", "get_logger"]
