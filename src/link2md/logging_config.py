import logging
import sys
from pathlib import Path
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Request log written by aiohttp.web while serving
ACCESS_LOGGER = "aiohttp.access"


def _build_handlers(level: int, format_string: str, log_file: Optional[Path]) -> list[logging.Handler]:
    formatter = logging.Formatter(format_string)

    # stderr keeps stdout free for Markdown output
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    format_string: Optional[str] = None,
    force: bool = False,
    access_log: bool = False,
) -> logging.Logger:
    """
    Set up logging configuration for link2md.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging output
        format_string: Optional custom format string for log messages
        force: If True, reconfigure even if handlers exist
        access_log: Also route the HTTP service's request log through
            the same handlers

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger("link2md")
    logger.setLevel(numeric_level)

    # Only clear and reconfigure if forced or no handlers exist
    if force or not logger.handlers:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.handlers.extend(
            _build_handlers(numeric_level, format_string or DEFAULT_FORMAT, Path(log_file) if log_file else None)
        )

    logger.propagate = False

    if access_log:
        access_logger = logging.getLogger(ACCESS_LOGGER)
        access_logger.setLevel(logging.INFO)
        access_logger.handlers = list(logger.handlers)
        access_logger.propagate = False

    return logger
