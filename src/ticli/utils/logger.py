"""Logging configuration for ticli.

Every module logs through ``logging.getLogger(__name__)``, which places
it under the ``ticli`` namespace configured here.  Output goes to
stderr so that command output on stdout stays machine-readable.
"""

from __future__ import annotations

import logging
import sys

LOGGER_NAME: str = "ticli"
DEFAULT_LOG_LEVEL: str = "WARNING"
DEFAULT_LOG_FORMAT: str = "%(levelname)s: %(message)s"

_SILENT_LEVEL = logging.CRITICAL + 1


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    *,
    quiet: bool = False,
    format_string: str | None = None,
) -> logging.Logger:
    """Configure the ``ticli`` logger with a single stderr handler.

    Calling this again replaces the previous handler, so each CLI
    invocation starts from a known state.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        quiet: Suppress all records regardless of *level*.
        format_string: Custom log format; :data:`DEFAULT_LOG_FORMAT` if omitted.

    Returns:
        The configured ``ticli`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    silence(quiet)
    return logger


def silence(quiet: bool) -> None:
    """Turn all ``ticli`` log output off (``True``) or back on."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers:
        handler.setLevel(_SILENT_LEVEL if quiet else logging.NOTSET)
