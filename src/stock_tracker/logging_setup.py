"""Logging setup for Stock Tracker.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
setup_logging() once to attach handlers to the package logger.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

PACKAGE_LOGGER = "stock_tracker"


def setup_logging(level: str = "WARNING", log_file: Path | None = None) -> logging.Logger:
    """Attach a stderr handler, and optionally a rotating file handler.

    Args:
        level: Level name such as "INFO"; unknown names fall back to WARNING
        log_file: Optional path for a rotating log file

    Returns:
        The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    # Prevent adding handlers multiple times if logger is already set up
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"  # 5 MB
        )
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    return logger
