"""
Logging configuration for the BDP checker.

Provides structured logging with appropriate levels and formatting.
Supports both console and file output with rotation.
"""

import logging
import sys
import time
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "bdp_core"

# Default format for log messages
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True,
    detailed: bool = False,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
) -> logging.Logger:
    """Configure logging for the BDP checker.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, logs to console only.
        console: Whether to log to console (stderr)
        detailed: Whether to use detailed format (includes file/line number)
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup log files to keep

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logging(level=logging.DEBUG, log_file=Path('bdp.log'))
        >>> logger.info("Starting BDP check")
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    fmt = DETAILED_FORMAT if detailed else DEFAULT_FORMAT
    formatter = logging.Formatter(fmt)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module.

    Module names already inside the package (``bdp_core.live_map``) are used
    as-is; anything else is nested under the package logger.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.debug("Pushing segment 42")
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class LogTimer:
    """Context manager for timing operations with automatic logging.

    Example:
        >>> logger = get_logger(__name__)
        >>> with LogTimer(logger, "Live map query"):
        ...     routes = client.find_routes(start, end, 5000)
        INFO - Live map query: 0.45s
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time: Optional[float] = None
        self.elapsed: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            self.elapsed = time.perf_counter() - self.start_time
            self.logger.log(self.level, f"{self.operation}: {self.elapsed:.2f}s")
        return False  # Don't suppress exceptions


def log_exception(logger: logging.Logger, message: str, exc: Exception) -> None:
    """Log an exception message at WARNING and its traceback at DEBUG.

    Args:
        logger: Logger instance
        message: Context message
        exc: Exception that was caught
    """
    logger.warning(f"{message}: {exc}")
    logger.debug(
        f"Traceback:\n{''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))}"
    )
