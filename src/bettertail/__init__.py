"""better-tail: tail a file, descriptor or stream, optionally following it."""
from __future__ import annotations

from importlib import metadata as _metadata

from .config import RetryPolicy, Selector, TailOptions, load_options, validate_options
from .errors import (
    AccessError,
    InvalidOptionError,
    InvalidTargetError,
    ReadError,
    RetryMaxAttemptsError,
    RetryTimeoutError,
    TailError,
)
from .tail import TRUNCATED_MARKER, Tail, create

_FALLBACK_VERSION = "0.1.0"  # keep in sync with pyproject.toml

try:  # pragma: no cover
    __version__ = _metadata.version("better-tail")
except _metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = _FALLBACK_VERSION

__all__ = [
    "AccessError",
    "InvalidOptionError",
    "InvalidTargetError",
    "ReadError",
    "RetryMaxAttemptsError",
    "RetryPolicy",
    "RetryTimeoutError",
    "Selector",
    "TRUNCATED_MARKER",
    "Tail",
    "TailError",
    "TailOptions",
    "__version__",
    "create",
    "load_options",
    "validate_options",
]
