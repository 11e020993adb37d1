"""
Logging configuration for guarded analysis runs.

The console receives summary-level messages; the per-run log file receives
full detail. Both are opened in append mode for the duration of one run.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

Level = Union[int, str]


def _coerce_level(level: Level) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_logging(
    level: Level = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    file_level: Level = logging.DEBUG,
) -> Optional[Path]:
    """
    Configure process-wide logging.

    Args:
        level: Console level (e.g. logging.INFO or "WARNING").
        log_file: Optional per-run log file; parent directories are created.
        format_string: Optional custom format string for log messages.
        file_level: Level for the log file. Default is DEBUG (full detail).

    Returns:
        The log file path, or None when logging to the console only.
    """
    if format_string is None:
        format_string = DEFAULT_FORMAT

    console_level = _coerce_level(level)
    handlers = []

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(format_string))
    handlers.append(console_handler)

    root_level = console_level

    # File handler
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8", mode="a")
        file_handler.setLevel(_coerce_level(file_level))
        file_handler.setFormatter(logging.Formatter(format_string))
        handlers.append(file_handler)
        root_level = min(root_level, file_handler.level)

    logging.basicConfig(
        level=root_level,
        handlers=handlers,
        format=format_string,
        force=True  # Override any existing configuration
    )

    return log_file


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        A configured logger instance.
    """
    return logging.getLogger(name)
