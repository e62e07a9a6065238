"""
Logging configuration.

Configures loguru sinks for services, workers and scripts.
"""

import sys

from loguru import logger

from app.config.settings import settings


def setup_logging(log_file: str | None = None, level: str | None = None) -> None:
    """
    Replace the default loguru sink with stderr and an optional file sink.

    Args:
        log_file: Path of the rotating log file (defaults to settings.log_file)
        level: Minimum level (defaults to settings.log_level)
    """
    level = level or settings.log_level
    log_file = log_file if log_file is not None else settings.log_file

    logger.remove()
    logger.add(sys.stderr, level=level)

    if log_file:
        logger.add(
            log_file,
            rotation="1 day",
            retention="7 days",
            level=level,
        )

    logger.debug(f"Logging configured: level={level}, file={log_file}")
