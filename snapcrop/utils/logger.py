"""
Logging Configuration Module.

Every SnapCrop module logs under the ``snapcrop`` namespace. The CLI
configures that namespace once at startup; library users who never call
``setup_logger`` get Python's default handling.

Usage:
    from snapcrop.utils.logger import setup_logger_from_config, get_logger

    setup_logger_from_config()
    logger = get_logger(__name__)
    logger.info("Cropping 3 regions")

Environment:
    SNAPCROP_LOG_LEVEL overrides the configured level (e.g. DEBUG).
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

import colorama
from colorama import Fore, Style

colorama.init()

LOGGER_NAMESPACE = "snapcrop"
LOG_LEVEL_ENV_VAR = "SNAPCROP_LOG_LEVEL"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Console formatter that tints each record by level."""

    LEVEL_COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        if not color:
            return text
        return f"{color}{text}{Style.RESET_ALL}"


def _level_from(name: Optional[str], fallback: int = logging.INFO) -> int:
    level = logging.getLevelName((name or '').upper())
    return level if isinstance(level, int) else fallback


def setup_logger(
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,
    backup_count: int = 5,
    colorize: bool = True
) -> logging.Logger:
    """
    Configure the ``snapcrop`` logger.

    Calling it again replaces the previous handlers, so the CLI can be
    invoked repeatedly in one process without duplicate output.

    Args:
        level: Level name; SNAPCROP_LOG_LEVEL takes precedence.
        log_format: Record format for both handlers.
        date_format: ``asctime`` format.
        log_file: Optional rotating log file.
        max_bytes: Rotate once the file reaches this size.
        backup_count: Rotated files to keep.
        colorize: Tint console records by level.

    Returns:
        The namespace logger.
    """
    log_format = log_format or DEFAULT_FORMAT
    date_format = date_format or DEFAULT_DATE_FORMAT
    numeric_level = _level_from(os.getenv(LOG_LEVEL_ENV_VAR) or level)

    app_logger = logging.getLogger(LOGGER_NAMESPACE)
    app_logger.setLevel(numeric_level)
    app_logger.handlers.clear()
    app_logger.propagate = False

    formatter_cls = ColoredFormatter if colorize else logging.Formatter
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(numeric_level)
    console.setFormatter(formatter_cls(log_format, datefmt=date_format))
    app_logger.addHandler(console)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        rotating.setLevel(numeric_level)
        rotating.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        app_logger.addHandler(rotating)

    app_logger.debug(f"Logging initialized at {logging.getLevelName(numeric_level)}")
    return app_logger


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger below the ``snapcrop`` namespace.

    Example:
        >>> get_logger("main").name
        'snapcrop.main'
    """
    if name == LOGGER_NAMESPACE or name.startswith(LOGGER_NAMESPACE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def setup_logger_from_config() -> logging.Logger:
    """Configure logging from the ``logging`` and ``paths`` settings."""
    from config import get_config

    log_file = None
    if get_config("logging.file.enabled", False):
        log_dir = Path(get_config("paths.log_dir", "logs"))
        log_file = str(log_dir / get_config("logging.file.filename", "snapcrop.log"))

    return setup_logger(
        level=get_config("logging.level", "INFO"),
        log_format=get_config("logging.format"),
        date_format=get_config("logging.date_format"),
        log_file=log_file,
        max_bytes=get_config("logging.file.max_bytes", 10485760),
        backup_count=get_config("logging.file.backup_count", 5),
        colorize=get_config("logging.console.colorize", True)
    )
