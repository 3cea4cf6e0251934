from __future__ import annotations
import errno as _errno
from typing import Optional


class TailError(Exception):
    """Base class for every failure that terminates a Tail."""


class InvalidTargetError(TailError):
    def __init__(self, message: str = "Invalid target provided") -> None:
        super().__init__(message)


class InvalidOptionError(TailError, ValueError):
    def __init__(self, option: str, value: object) -> None:
        super().__init__(f"Invalid value provided to {option} option: {value}")
        self.option = option
        self.value = value


class AccessError(TailError):
    """
    Path target cannot be opened for reading.
    Keeps the errno of the underlying OSError so callers can tell
    ENOENT from EACCES without unwrapping.
    """
    def __init__(self, filename: str, err: OSError) -> None:
        super().__init__(f"Cannot access {filename}: {err.strerror or err}")
        self.filename = filename
        self.errno: Optional[int] = err.errno
        self.code: Optional[str] = _errno.errorcode.get(err.errno) if err.errno else None


class RetryTimeoutError(TailError):
    def __init__(self, message: str = "Retry timeout reached") -> None:
        super().__init__(message)


class RetryMaxAttemptsError(TailError):
    def __init__(self, message: str = "Max retries reached") -> None:
        super().__init__(message)


class ReadError(TailError):
    pass
