"""Logging setup for the Snowflake worker."""

import logging

from snowflake_worker.config import Settings

PACKAGE_LOGGER = "snowflake_worker"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> logging.Logger:
    """Apply the configured log level to the package logger.

    A stream handler is only attached when the root logger has none, so an
    embedding application keeps control of its own handlers.

    Args:
        settings: Application settings

    Returns:
        The package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level)
    logger.setLevel(level)

    if not logging.getLogger().handlers and not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
