import logging
from typing import Optional

from .config import Settings


def configure_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """Set up the ``portal_api`` logger from Settings (LOG_LEVEL, LOG_FORMAT).

    A stream handler is attached only when neither the package logger nor the
    root logger has one, so uvicorn/pytest handlers are reused and repeated app
    factories do not stack handlers.
    """
    settings = settings or Settings()
    package_logger = logging.getLogger("portal_api")
    package_logger.setLevel(settings.LOG_LEVEL.upper())
    if not package_logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(settings.LOG_FORMAT))
        package_logger.addHandler(handler)
    return package_logger


def get_logger(name: str):
    return logging.getLogger(name)
