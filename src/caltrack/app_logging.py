"""Logging configuration helpers."""

import logging
import sys
from typing import TextIO

LOGGER_NAME = "caltrack"
LOG_FORMAT = "%(levelname)s: %(name)s: %(message)s"


def configure_logging(
    level: int | str = logging.INFO, stream: TextIO | None = None
) -> None:
    """Configure the caltrack logger with a single stream handler.

    ``level`` takes a number or a level name such as ``"debug"``. Records go
    to stderr unless ``stream`` is given, keeping rendered output on stdout
    clean. Repeated calls only adjust the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if logger.handlers:
        return
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
