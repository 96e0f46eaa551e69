"""
Logging utilities for EPUB Narrator.

Console logging for interactive runs, plus an optional daily rotating log
file for unattended batch runs.
"""

import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler
from typing import Optional


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Track if logging has been set up to avoid duplicate handlers
_logging_configured = False


def setup_logging(
    level: str = "INFO",
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    log_file: Optional[str] = None
) -> None:
    """Set up logging configuration for the project.

    Configures the root logger with a stdout handler and, when log_file is
    given, a file handler rotated daily (10 days kept).
    Idempotent - safe to call multiple times.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR).
        format: Log message format string.
        date_format: Date format for timestamps.
        log_file: Optional path of a rotating log file.

    Examples:
        >>> setup_logging(level="DEBUG")
        >>> logger = get_logger(__name__)
        >>> logger.debug("Debug message")
    """
    global _logging_configured

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(format, date_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    if _logging_configured:
        # Already configured: refresh level and formatter only
        for handler in root_logger.handlers:
            handler.setLevel(numeric_level)
            handler.setFormatter(formatter)
        if log_file and not _has_file_handler(root_logger, log_file):
            root_logger.addHandler(_make_file_handler(log_file, numeric_level, formatter))
        return

    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        root_logger.addHandler(_make_file_handler(log_file, numeric_level, formatter))

    _logging_configured = True


def _make_file_handler(log_file: str, level: int,
                       formatter: logging.Formatter) -> logging.Handler:
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    handler = TimedRotatingFileHandler(
        log_file,
        when='D',
        interval=1,
        backupCount=10,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _has_file_handler(root_logger: logging.Logger, log_file: str) -> bool:
    target = os.path.abspath(log_file)
    return any(
        isinstance(h, TimedRotatingFileHandler) and h.baseFilename == target
        for h in root_logger.handlers
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for the specified module.

    If logging hasn't been set up yet, sets it up with defaults.

    Args:
        name: Name of the module/component requesting the logger.

    Returns:
        Configured logger instance.

    Examples:
        >>> logger = get_logger(__name__)
        >>> logger.info("Starting extraction")
    """
    if not _logging_configured:
        setup_logging()

    return logging.getLogger(name)
