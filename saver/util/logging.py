"""Logging configuration for the application."""

import logging
import sys

from saver.config import Settings

# Loggers that leak request URLs (and with them OAuth codes) at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "uvicorn.access")


def setup_logging(settings: Settings) -> None:
    """Configure stdlib logging for route modules and third-party libraries.

    Domain and application code logs through Logfire; this covers the
    ``logging.getLogger(__name__)`` loggers used by the HTTP layer.

    Args:
        settings: Application settings
    """
    if settings.debug:
        level = logging.DEBUG
    elif settings.environment in ("staging", "production"):
        level = logging.INFO
    else:
        level = logging.DEBUG if settings.environment == "development" else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("saver").setLevel(level)

    logging.getLogger(__name__).info(
        "Logging configured: environment=%s, level=%s",
        settings.environment,
        logging.getLevelName(level),
    )
