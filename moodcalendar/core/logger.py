import os
import logging
from logging.handlers import TimedRotatingFileHandler

from moodcalendar.core.config import settings

APP_LOGGER = "moodcalendar"

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure_app_logger() -> logging.Logger:
    """Attach console and daily file output to the package logger, once."""
    app_logger = logging.getLogger(APP_LOGGER)
    if app_logger.handlers:
        return app_logger

    app_logger.setLevel(settings.LOG_LEVEL)
    # uvicorn and alembic configure the root logger themselves
    app_logger.propagate = False
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    app_logger.addHandler(console)

    os.makedirs(settings.LOG_DIR, exist_ok=True)
    file_handler = TimedRotatingFileHandler(
        filename=os.path.join(settings.LOG_DIR, f"{APP_LOGGER}.log"),
        when="midnight",
        backupCount=7,
        encoding="utf-8",
    )
    file_handler.suffix = "%Y-%m-%d"
    file_handler.setFormatter(formatter)
    app_logger.addHandler(file_handler)

    return app_logger


def get_logger(name: str = APP_LOGGER) -> logging.Logger:
    """
    Logger for one component, e.g. ``get_logger("database")`` gives
    ``moodcalendar.database``. Components have no handlers of their own and
    write through the package logger.
    """
    app_logger = _configure_app_logger()
    if name == APP_LOGGER:
        return app_logger
    if name.startswith(f"{APP_LOGGER}."):
        name = name[len(APP_LOGGER) + 1:]
    return app_logger.getChild(name)
