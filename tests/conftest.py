"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides
common fixtures and helpers for all test files.
"""
from __future__ import annotations
import time
from typing import Callable, Dict, List

import pytest
from pathlib import Path

from bettertail import Tail


TEN_LINES = [f"line {i} of the sample log" for i in range(1, 11)]


def wait_for(predicate: Callable[[], bool], timeout: float = 3.0, step: float = 0.01) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` seconds elapse."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(step)
    return predicate()


class Recorder:
    """Collects every event a Tail emits, in order."""

    def __init__(self, tail: Tail) -> None:
        self.events: List[tuple] = []
        self.lines: List[str] = []
        self.data: List[bytes] = []
        self.errors: List[Exception] = []
        self.ends = 0
        tail.on("line", self._line)
        tail.on("data", self._data)
        tail.on("error", self._error)
        tail.on("end", self._end)

    def _line(self, line: str) -> None:
        self.events.append(("line", line))
        self.lines.append(line)

    def _data(self, data: bytes) -> None:
        self.events.append(("data", data))
        self.data.append(data)

    def _error(self, err: Exception) -> None:
        self.events.append(("error", err))
        self.errors.append(err)

    def _end(self) -> None:
        self.events.append(("end",))
        self.ends += 1


@pytest.fixture
def record() -> Callable[[Tail], Recorder]:
    return Recorder


@pytest.fixture
def run_tail() -> Callable[..., Recorder]:
    """Run a non-following Tail to completion and return what it emitted."""
    def _run(target, options=None, **overrides) -> Recorder:
        tail = Tail(target, options, **overrides)
        recorder = Recorder(tail)
        tail.run()
        return recorder
    return _run


@pytest.fixture
def ten_lines_file(tmp_path: Path) -> Path:
    """Ten lines, no trailing newline."""
    p = tmp_path / "ten.log"
    p.write_bytes("\n".join(TEN_LINES).encode("utf-8"))
    return p


@pytest.fixture
def ten_lines_eol_file(tmp_path: Path) -> Path:
    """Ten lines ending with a trailing newline."""
    p = tmp_path / "ten_eol.log"
    p.write_bytes(("\n".join(TEN_LINES) + "\n").encode("utf-8"))
    return p


@pytest.fixture
def long_file(tmp_path: Path) -> Path:
    """Fifty CRLF-terminated lines, no trailing terminator."""
    p = tmp_path / "long.log"
    p.write_bytes("\r\n".join(f"entry {i:03d} héllo" for i in range(50)).encode("utf-8"))
    return p
