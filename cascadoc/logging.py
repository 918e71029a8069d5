"""Logging utilities for cascadoc runs."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "cascadoc"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the cascadoc hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the cascadoc logger with console output and optional file sink.

    ``verbose`` shows resolved converter arguments; ``quiet`` keeps only
    warnings and failures on the console. The file sink always records at
    the console level or lower.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(min(level, logging.INFO) if log_file is not None else level)
    logger.propagate = False

    # Watch and preview runs may reconfigure; drop stale handlers first.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[cascadoc] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(min(level, logging.INFO))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
