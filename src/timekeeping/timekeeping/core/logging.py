from __future__ import annotations

import logging
import sys

LOGGER_NAME = "timekeeping"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Safe to call more than once (app factory in tests); the handler is only
    added the first time.
    """

    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    if not any(getattr(h, "_timekeeping", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._timekeeping = True
        logger.addHandler(handler)

    return logger
