"""Logging configuration."""
import logging
import sys

from smartorder.core.config import settings

# Client libraries that log every request at INFO
QUIET_LOGGERS = ("httpx", "openai", "stripe", "sqlalchemy.engine", "multipart")


def setup_logging() -> None:
    """Configure root logging to stdout at the configured level."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
