"""Logging configuration for engine events."""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from messenger.core.settings import Settings, settings

LOGGER_NAME = "messenger"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(app_settings: Settings | None = None) -> logging.Logger:
    """Configure the package logger with a stream handler and optional rotating file."""
    app_settings = app_settings or settings
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(app_settings.log_level.upper())
    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)
        if app_settings.log_file:
            file_handler = RotatingFileHandler(
                app_settings.log_file, maxBytes=5 * 1024 * 1024, backupCount=3
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
    return logger
