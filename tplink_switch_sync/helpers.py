"""Helper functions."""

from __future__ import annotations

import logging
from typing import Any


def _extra(kwargs: dict[str, Any]) -> str:
    return " ".join(f"{key}={value}" for key, value in kwargs.items())


def _log(logger: logging.Logger, level: int, context: str, message: str, kwargs: dict[str, Any]) -> None:
    if not logger.isEnabledFor(level):
        return
    extra = _extra(kwargs)
    if extra:
        logger.log(level, "(%s) %s [%s]", context, message, extra)
    else:
        logger.log(level, "(%s) %s", context, message)


def log_debug(logger: logging.Logger, context: str, message: str, **kwargs: Any) -> None:
    """Log debug with a context tag and key=value details."""
    _log(logger, logging.DEBUG, context, message, kwargs)


def log_info(logger: logging.Logger, context: str, message: str, **kwargs: Any) -> None:
    """Log info."""
    _log(logger, logging.INFO, context, message, kwargs)


def log_warning(logger: logging.Logger, context: str, message: str, **kwargs: Any) -> None:
    """Log warning."""
    _log(logger, logging.WARNING, context, message, kwargs)


def log_error(logger: logging.Logger, context: str, message: str, **kwargs: Any) -> None:
    """Log error."""
    _log(logger, logging.ERROR, context, message, kwargs)
