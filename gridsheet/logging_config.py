"""
Logging for the gridsheet package.

Records go to stdout and, when a log file is configured, to that file too.
Level and file come from GridConfig; GRIDSHEET_DEBUG and GRIDSHEET_LOG_FILE
override them for a single run.
"""
import logging
import os
import sys
from typing import Mapping, Optional, Union

from gridsheet.config import LOG_LEVELS, GridConfig

LOGGER_NAME = "gridsheet"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {level!r}")
    return getattr(logging, name)


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Attach fresh console (and optional file) handlers to the package logger."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(resolve_level(level))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging at %s to %s", logging.getLevelName(logger.level), log_file or "console only")
    return logger


def setup_logging_from_config(config: GridConfig, environ: Optional[Mapping[str, str]] = None) -> logging.Logger:
    environ = os.environ if environ is None else environ
    level = "DEBUG" if environ.get("GRIDSHEET_DEBUG") else config.log_level
    log_file = environ.get("GRIDSHEET_LOG_FILE") or config.log_file or None
    return setup_logging(level, log_file)
