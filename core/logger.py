"""
Service logger
"""
import logging
import sys

from core.environment.config import settings


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logger(name: str = "tts", level: str = "INFO") -> logging.Logger:
    """
    Configure the service logger once

    Args:
        name: Logger name
        level: Level name (DEBUG, INFO, ...)

    Returns:
        Configured logger
    """
    log = logging.getLogger(name)

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)

    log.setLevel(level.upper())
    log.propagate = False
    return log


logger = setup_logger(level=settings.log_level)
