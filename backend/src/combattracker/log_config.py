"""
Logging configuration for applications embedding the tracker.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from combattracker.config import TrackerSettings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    settings: Optional[TrackerSettings] = None,
) -> logging.Logger:
    """
    Attach console (and optional file) handlers to the package logger.

    The level defaults to `settings.log_level`, or to the COMBAT_LOG_LEVEL
    environment override when no settings are given.
    """
    if level is None:
        level = (settings or TrackerSettings.from_env()).log_level

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    app_logger = logging.getLogger("combattracker")
    app_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # calling twice must not duplicate output
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        app_logger.addHandler(file_handler)

    return app_logger
