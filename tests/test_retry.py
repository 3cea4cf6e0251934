"""
Test cases for the retry state machine.

A fake clock advances only when the controller sleeps, so budgets are
checked deterministically.
"""
from __future__ import annotations
import os
import pytest

from bettertail.config import RetryPolicy
from bettertail.errors import AccessError, RetryMaxAttemptsError, RetryTimeoutError
from bettertail.retry import RetryController, check_access


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _controller(path, policy, clock, **kwargs):
    return RetryController(str(path), policy, sleep=clock.sleep, clock=clock, **kwargs)


class TestCheckAccess:
    def test_readable_file(self, ten_lines_file):
        check_access(str(ten_lines_file))

    def test_missing_file_keeps_error_code(self, tmp_path):
        with pytest.raises(AccessError) as exc:
            check_access(str(tmp_path / "missing.log"))
        assert exc.value.code == "ENOENT"
        assert exc.value.filename.endswith("missing.log")

    @pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="root bypasses permissions")
    def test_unreadable_file(self, tmp_path):
        p = tmp_path / "secret.log"
        p.write_text("x")
        p.chmod(0)
        with pytest.raises(AccessError) as exc:
            check_access(str(p))
        assert exc.value.code == "EACCES"


class TestRetryController:
    def test_success_without_waiting(self, ten_lines_file):
        clock = FakeClock()
        assert _controller(ten_lines_file, RetryPolicy(), clock).wait_until_accessible() is True
        assert clock.sleeps == []

    def test_max_attempts(self, tmp_path):
        clock = FakeClock()
        controller = _controller(tmp_path / "never.log", RetryPolicy(max_attempts=3), clock)
        with pytest.raises(RetryMaxAttemptsError, match="Max retries reached"):
            controller.wait_until_accessible()
        # initial attempt plus three retries
        assert controller.attempts == 4
        assert len(clock.sleeps) == 3

    def test_timeout(self, tmp_path):
        clock = FakeClock()
        controller = _controller(
            tmp_path / "never.log", RetryPolicy(timeout=5.0), clock, default_interval=1.0
        )
        with pytest.raises(RetryTimeoutError, match="Retry timeout reached"):
            controller.wait_until_accessible()
        assert clock.now - controller.started_at >= 5.0
        assert clock.sleeps == [1.0] * 5

    def test_interval_overrides_default(self, tmp_path):
        clock = FakeClock()
        controller = _controller(
            tmp_path / "never.log",
            RetryPolicy(interval=2.0, max_attempts=1),
            clock,
            default_interval=0.5,
        )
        with pytest.raises(RetryMaxAttemptsError):
            controller.wait_until_accessible()
        assert clock.sleeps == [2.0]

    def test_unbounded_retry_until_file_appears(self, tmp_path):
        p = tmp_path / "late.log"
        clock = FakeClock()

        def sleep(seconds):
            clock.sleep(seconds)
            if len(clock.sleeps) == 7:
                p.write_text("finally\n")

        controller = RetryController(str(p), RetryPolicy(), sleep=sleep, clock=clock)
        assert controller.wait_until_accessible() is True
        assert controller.attempts == 7

    def test_stop_while_waiting(self, tmp_path):
        clock = FakeClock()
        controller = _controller(
            tmp_path / "never.log", RetryPolicy(), clock, should_stop=lambda: len(clock.sleeps) >= 2
        )
        assert controller.wait_until_accessible() is False

    def test_debug_messages(self, tmp_path):
        messages = []
        clock = FakeClock()
        controller = _controller(
            tmp_path / "never.log", RetryPolicy(max_attempts=0), clock, debug=messages.append
        )
        with pytest.raises(RetryMaxAttemptsError):
            controller.wait_until_accessible()
        assert any("Failed to check target" in m for m in messages)
