"""Logging configuration."""

import logging
import os

LOG_LEVEL_ENV = "CANBERRAPY_LOG_LEVEL"

_PACKAGE_LOGGER = "canberrapy"
_configured = False


def _configure_package_logger() -> None:
    """Attach one handler to the package logger; module loggers propagate to it."""
    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    package_logger.setLevel(getattr(logging, level_name, logging.WARNING))
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        package_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a canberrapy module (level from $CANBERRAPY_LOG_LEVEL)."""
    global _configured
    if not _configured:
        _configure_package_logger()
        _configured = True
    return logging.getLogger(name)
