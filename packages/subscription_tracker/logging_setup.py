"""Logging for ``subscription_tracker``.

Modules log through ``get_logger("subscription_tracker.<module>")`` with
``"<stage>:<event> key=value"`` messages (``detect:drop``, ``parse:file``...).
Only the CLI calls :func:`configure_logging`; a host application embedding the
package configures the ``"subscription_tracker"`` logger itself.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "subscription_tracker"
_LEVEL_ENV = "SUBSCRIPTION_TRACKER_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    """Resolve a level from an int, a name/number string, or the environment."""

    if level is None:
        env_val = os.getenv(_LEVEL_ENV)
        return _parse_level(env_val) if env_val else logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelNamesMapping().get(name)
    if numeric is None:
        raise ValueError(f"unknown log level: {level!r}")
    return numeric


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Send package logs to ``stream``; later calls are no-ops.

    ``level`` falls back to ``SUBSCRIPTION_TRACKER_LOG_LEVEL`` and then INFO.
    Raises ``ValueError`` for an unknown level name.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = _parse_level(level)
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    # Library default: silent until configure_logging() runs.
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
