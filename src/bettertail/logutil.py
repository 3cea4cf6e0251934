"""Logging helpers.

The package logs through a single ``bettertail`` logger. Debug output of a
Tail goes through a callable built once at construction, so nothing in the
core depends on process-wide state such as environment variables.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Union

Debugger = Callable[..., Any]

_LOGGER: Optional[logging.Logger] = None


def get_logger() -> logging.Logger:
    global _LOGGER
    if _LOGGER is None:
        logger = logging.getLogger("bettertail")
        # Only add a handler if the application hasn't configured logging.
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("[%(name)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        logger.setLevel(logging.WARNING)
        _LOGGER = logger
    return _LOGGER


def _noop(*args: Any) -> None:
    return None


def make_debugger(debug: Union[bool, Debugger, None]) -> Debugger:
    """Turn the ``debug`` option into a callable taking print-style arguments.

    A callable is used as-is. ``True`` sends messages to the package logger
    at DEBUG level (and lowers its level accordingly). Anything else is a no-op.
    """
    if callable(debug):
        return debug
    if debug is True:
        logger = get_logger()
        logger.setLevel(logging.DEBUG)

        def _log(*args: Any) -> None:
            logger.debug(" ".join(str(a) for a in args))

        return _log
    return _noop


__all__ = ["get_logger", "make_debugger", "Debugger"]
