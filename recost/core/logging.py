"""
Loguru configuration shared by the API and the services.
"""

import sys
from loguru import logger
from .config import settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level> | {extra}"
)


def setup_logging():
    """
    Replace loguru's default sink with one honoring LOG_LEVEL and LOG_JSON.

    Returns the configured logger so callers can do `logger = setup_logging()`.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        format=LOG_FORMAT,
        serialize=settings.log_json,
        backtrace=False,
        diagnose=settings.app_env == "dev",
    )
    logger.debug("Logging configured", level=settings.log_level, json=settings.log_json)
    return logger
