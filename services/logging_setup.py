"""Logging for the projection services.

Service modules log through ``get_logger(__name__)`` and stay silent until an
entrypoint such as ``scripts/project_cashflow.py`` calls ``configure_logging``.
"""

from __future__ import annotations

import logging
import os
import sys

PACKAGE_LOGGER = "services"
LEVEL_ENV_VAR = "CASHFLOW_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def resolve_level(level: int | str | None = None) -> int:
    """Explicit level, then ``CASHFLOW_LOG_LEVEL``, then INFO; unknown names fall through."""
    for candidate in (level, os.getenv(LEVEL_ENV_VAR)):
        if isinstance(candidate, int):
            return candidate
        if not isinstance(candidate, str) or not candidate.strip():
            continue
        name = candidate.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def configure_logging(level: int | str | None = None) -> None:
    global _configured
    if _configured:
        return

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(pkg_logger.handlers):
        if isinstance(handler, logging.NullHandler):
            pkg_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(resolve_level(level))
    pkg_logger.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if not _configured and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
