"""Logging setup for applications that want to see library logs."""

import sys

from loguru import logger

from gemini_rest.config import settings


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str | None = None, sink=sys.stdout) -> int:
    """
    Install a single loguru sink and enable the package logger.

    Args:
        level: Log level, defaults to settings.log_level
        sink: Where to write, defaults to stdout

    Returns:
        The loguru handler id
    """
    logger.remove()
    handler_id = logger.add(
        sink,
        format=LOG_FORMAT,
        level=level or settings.log_level,
    )
    logger.enable("gemini_rest")
    return handler_id
