"""Shared logger utility.

Provides a consistent get_logger for library code. Falls back to a minimal
basicConfig on first use when nothing has called configure_logging yet, so
stage debug output is never silently dropped in ad-hoc scripts.
"""

from __future__ import annotations

import logging

from .json import HUMAN_FORMAT

_configured = False


def get_logger(name: str, auto_configure: bool = True) -> logging.Logger:
    """Get a logger that propagates to the configured root handler.

    Args:
        name: Logger name (usually dotted module path)
        auto_configure: Whether to install minimal logging on first use

    Returns:
        Logger instance
    """
    global _configured

    if auto_configure and not _configured:
        logging.basicConfig(level=logging.INFO, format=HUMAN_FORMAT)
        _configured = True

    logger = logging.getLogger(name)
    logger.propagate = True
    return logger


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


def mark_configured():
    """Mark logging as configured (called by shared.logging.json.configure_logging)."""
    global _configured
    _configured = True
