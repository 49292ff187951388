"""
Logging setup utilities for game runs.

This module configures the root logger with console output and, optionally,
a log file.
"""

import logging
from pathlib import Path
from typing import Optional, Union

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None
) -> Optional[Path]:
    """
    Set up logging with a console handler and an optional file handler.

    Calling this again replaces the handlers installed by the previous call.

    Args:
        level: Logging level (default: logging.INFO)
        log_file: Optional path of a log file; parent directories are created
        format_string: Optional custom format string. If None, uses default format.

    Returns:
        Path to the log file, or None when logging to the console only

    Example:
        >>> setup_logging(logging.DEBUG, "runs/game.log")
        >>> logger = logging.getLogger(__name__)
        >>> logger.info("This will be logged to both console and file")
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    log_path = None
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    return log_path
