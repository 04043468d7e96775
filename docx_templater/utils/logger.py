"""
Logging setup for DOCX Templater.

Library modules only create module loggers; handlers are installed by the
application (or the CLI) through ``setup_logging``.
"""

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _validate_level(level: str) -> int:
    if level.upper() not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}")
    return getattr(logging, level.upper())


def setup_logging(level: str = "INFO", use_rich: bool = True,
                  console: Optional[Console] = None) -> None:
    """
    Setup logging for the application.

    Args:
        level: Log level
        use_rich: Whether to use rich logging
        console: Console the rich handler writes to (stderr by default)
    """
    numeric_level = _validate_level(level)

    if use_rich:
        handler: logging.Handler = RichHandler(
            console=console or Console(stderr=True),
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        formatter = logging.Formatter(fmt="%(message)s", datefmt="[%X]")
    else:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handler.setFormatter(formatter)
    handler.setLevel(numeric_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)


def set_log_level(level: str) -> None:
    """
    Set log level on the root logger and its handlers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    numeric_level = _validate_level(level)
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers:
        handler.setLevel(numeric_level)
