"""Logging configuration for Notely entry points."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from rich.console import Console
from rich.logging import RichHandler

from notely.core.settings import Settings

APP_LOGGER = "notely"


def setup_logging(settings: Settings) -> logging.Logger:
    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(settings.log_level)
    logger.propagate = False

    if logger.handlers:
        return logger

    console_handler = RichHandler(
        console=Console(stderr=True), show_path=False, rich_tracebacks=True
    )
    console_handler.setLevel(settings.log_level)
    logger.addHandler(console_handler)

    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.log_file,
            maxBytes=2 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(file_handler)
        logger.setLevel(min(settings.log_level, logging.DEBUG))

    logger.debug("Logging initialized. log_file=%s", settings.log_file)
    return logger
