"""Logging configuration for the bridge."""

import logging
import sys

LOGGER_NAME = "gembridge"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Set up the bridge logger with a stdout handler.

    Args:
        level: Log level name ("DEBUG", "INFO", ...) or numeric level.

    Returns:
        The configured "gembridge" logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Clear any existing handlers so repeated app creation doesn't duplicate lines
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(console_handler)

    logger.propagate = True

    return logger


# Global logger instance
logger = setup_logging()
