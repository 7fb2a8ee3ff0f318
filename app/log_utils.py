"""Logger setup shared by the URL API and the code-generation service."""

import logging

from app.config import get_settings

__all__ = ["LOG_FORMAT", "setup_logger"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str) -> logging.Logger:
    """Return the named logger, attaching a stream handler the first time only."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(get_settings().LOG_LEVEL.upper())
    return logger
