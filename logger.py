"""Logging for the book catalog.

Log records go to a per-day file under ``config.log_dir`` and to the console.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional
from config import Config

LOGGER_NAME = "bookcatalog"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(levelname)s - %(message)s"


def log_file_path(config: Config, day: Optional[date] = None) -> Path:
    """Path of the catalog log file for a given day (today by default)."""
    day = day or date.today()
    return config.log_dir / f"{LOGGER_NAME}-{day.isoformat()}.log"


def _file_handler(config: Config) -> logging.Handler:
    config.log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file_path(config), encoding="utf-8")
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
    return handler


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def setup_logging(config: Config) -> logging.Logger:
    """Configure the catalog logger from the application config.

    Safe to call more than once: handlers from an earlier call are closed and
    replaced, so records are never written twice.

    Args:
        config: Application configuration with log_level and log_dir.

    Returns:
        The configured catalog logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.log_level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    for handler in (_file_handler(config), _console_handler()):
        handler.setLevel(config.log_level)
        logger.addHandler(handler)

    return logger


def get_logger() -> logging.Logger:
    """Return the catalog logger; modules call this at import time."""
    return logging.getLogger(LOGGER_NAME)
