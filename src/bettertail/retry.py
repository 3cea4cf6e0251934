from __future__ import annotations
import errno
import os
import time
from typing import Callable, Optional

from .config import RetryPolicy
from .errors import AccessError, RetryMaxAttemptsError, RetryTimeoutError
from .logutil import Debugger


def check_access(path: str) -> None:
    """Raise AccessError unless ``path`` exists and is readable."""
    try:
        os.stat(path)
    except OSError as e:
        raise AccessError(path, e) from e
    if not os.access(path, os.R_OK):
        err = PermissionError(errno.EACCES, os.strerror(errno.EACCES), path)
        raise AccessError(path, err) from err


class RetryController:
    """
    Waits for a path target to become readable.

    CHECKING -> DONE on success, CHECKING -> WAITING -> CHECKING on failure,
    until the timeout budget or the attempt budget runs out. Without any
    budget it retries forever.
    """
    def __init__(
        self,
        path: str,
        policy: RetryPolicy,
        *,
        default_interval: float = 1.0,
        sleep: Optional[Callable[[float], object]] = None,
        clock: Optional[Callable[[], float]] = None,
        should_stop: Optional[Callable[[], bool]] = None,
        debug: Optional[Debugger] = None,
    ) -> None:
        self.path = path
        self.policy = policy
        self.interval = policy.interval if policy.interval is not None else default_interval
        self._sleep = sleep or time.sleep
        self._clock = clock or time.monotonic
        self._should_stop = should_stop or (lambda: False)
        self._debug = debug or (lambda *a: None)
        self.attempts = 0
        self.started_at: Optional[float] = None

    def wait_until_accessible(self) -> bool:
        """
        Returns True once the path is readable, False if stopped meanwhile.

        Raises:
            RetryTimeoutError: timeout budget exceeded
            RetryMaxAttemptsError: attempt budget exceeded
        """
        self.started_at = self._clock()
        while True:
            try:
                self._debug("Checking target availability")
                check_access(self.path)
                self._debug("Target is available")
                return True
            except AccessError as e:
                self.attempts += 1
                self._debug(f"Failed to check target ({e.code}), attempt {self.attempts}")

            elapsed = self._clock() - self.started_at
            if self.policy.timeout is not None and elapsed >= self.policy.timeout:
                raise RetryTimeoutError()
            if self.policy.max_attempts is not None and self.attempts > self.policy.max_attempts:
                raise RetryMaxAttemptsError()

            self._debug(f"Retrying in {self.interval}s")
            self._sleep(self.interval)
            if self._should_stop():
                return False
