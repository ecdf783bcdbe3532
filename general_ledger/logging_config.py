"""Logging setup for the ledger."""

import logging
import sys

LOGGER_NAME = "general_ledger"

_FORMAT = "%(asctime)s level=%(levelname)s logger=%(name)s %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a single stream handler to the package logger.

    Safe to call more than once: an existing handler is reused
    and only the level changes.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    if not any(getattr(h, "_ledger_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._ledger_handler = True
        logger.addHandler(handler)

    logger.propagate = True
    return logger
