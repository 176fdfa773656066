"""
Logging utilities.

A single stderr handler sits on the ``wacsearch`` package logger; module
loggers (``logging.getLogger(__name__)`` or ``get_logger``) propagate to
it. The starting level comes from the ``WACSEARCH_LOG_LEVEL`` environment
variable (INFO when unset) and can be changed at runtime with
``set_log_level`` or ``SearchConfig.log_level``.
"""

import logging
import os
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LEVEL_ENV_VAR = 'WACSEARCH_LOG_LEVEL'
PACKAGE_LOGGER = 'wacsearch'


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level

    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def default_level() -> int:
    """Level the package logger starts at."""
    return _resolve_level(os.environ.get(LEVEL_ENV_VAR, 'INFO'))


def configure_package_logger() -> logging.Logger:
    """Attach the stderr handler to the package logger once."""
    logger = logging.getLogger(PACKAGE_LOGGER)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(default_level())

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger whose records reach the package handler
    """
    configure_package_logger()
    return logging.getLogger(name)


def set_log_level(level: int | str) -> None:
    """
    Set the level of the wacsearch logger and every logger below it.

    Args:
        level: Level number or name (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Raises:
        ValueError: If ``level`` is not a known level name
    """
    level = _resolve_level(level)

    configure_package_logger().setLevel(level)
    for name, logger in logging.root.manager.loggerDict.items():
        if name.startswith(f'{PACKAGE_LOGGER}.') and isinstance(logger, logging.Logger):
            logger.setLevel(level)
