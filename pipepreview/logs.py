"""Logging setup for a process whose terminal belongs to the UI.

Nothing is ever logged to the console. Records go to a file only when one is
named on the command line or through ``PIPEPREVIEW_LOG``.
"""

from __future__ import annotations

import logging
import os

LOG_ENV_VAR = "PIPEPREVIEW_LOG"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

_ROOT_LOGGER_NAME = "pipepreview"


def configure_logging(log_file: str | None = None) -> logging.Logger:
    """Attach a DEBUG file handler, or a ``NullHandler`` when no file is configured."""
    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    target = (log_file or os.environ.get(LOG_ENV_VAR, "")).strip()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False
    if not target:
        logger.addHandler(logging.NullHandler())
        return logger

    handler = logging.FileHandler(target, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return logger
