from __future__ import annotations
import os
import threading
from typing import BinaryIO, Callable, Iterator, Optional

from ..encodings import Codec
from ..errors import ReadError
from .target import DescriptorTarget, PathTarget, StreamTarget, Target

CHUNK_SIZE = 64 * 1024


def _read_path(path: str, start: int, end: Optional[int], handle_cb: Callable[[Optional[BinaryIO]], None]) -> Iterator[bytes]:
    with open(path, "rb") as f:
        handle_cb(f)
        try:
            f.seek(start)
            remaining = None if end is None else end - start
            while remaining is None or remaining > 0:
                step = CHUNK_SIZE if remaining is None else min(CHUNK_SIZE, remaining)
                chunk = f.read(step)
                if not chunk:
                    return
                if remaining is not None:
                    remaining -= len(chunk)
                yield chunk
        finally:
            handle_cb(None)


def _read_fd(fd: int, start: int, end: Optional[int]) -> Iterator[bytes]:
    # positional reads leave the descriptor offset alone
    pos = start
    while end is None or pos < end:
        step = CHUNK_SIZE if end is None else min(CHUNK_SIZE, end - pos)
        chunk = os.pread(fd, step, pos)
        if not chunk:
            return
        pos += len(chunk)
        yield chunk


def _read_stream(target: StreamTarget) -> Iterator[bytes]:
    while True:
        chunk = target.read(CHUNK_SIZE)
        if not chunk:
            return
        yield chunk


def read_all(target: Target) -> bytes:
    """Whole current content of a path or descriptor target."""
    try:
        if isinstance(target, PathTarget):
            with open(target.path, "rb") as f:
                return f.read()
        if isinstance(target, DescriptorTarget):
            size = os.fstat(target.fd).st_size
            return b"".join(_read_fd(target.fd, 0, size))
    except OSError as e:
        raise ReadError(f"Failed to read target content: {e}") from e
    raise ReadError("Cannot read the whole content of a stream target")


def current_size(target: Target) -> Optional[int]:
    """Size in bytes of a path or descriptor target; None for streams."""
    try:
        if isinstance(target, PathTarget):
            return os.stat(target.path).st_size
        if isinstance(target, DescriptorTarget):
            return os.fstat(target.fd).st_size
    except OSError as e:
        raise ReadError(f"Failed to get target size: {e}") from e
    return None


class LineReader:
    """
    Reads ``[start, end)`` of a target and hands every line to a callback
    as soon as its terminator has been read.
    """
    def __init__(self, codec: Codec) -> None:
        self.codec = codec
        self._handle: Optional[BinaryIO] = None
        self._lock = threading.Lock()
        # unterminated bytes held back by a read with flush=False
        self._carry = b""

    def _set_handle(self, handle: Optional[BinaryIO]) -> None:
        with self._lock:
            self._handle = handle

    def _chunks(self, target: Target, start: int, end: Optional[int]) -> Iterator[bytes]:
        if isinstance(target, PathTarget):
            return _read_path(target.path, start, end, self._set_handle)
        if isinstance(target, DescriptorTarget):
            return _read_fd(target.fd, start, end)
        return _read_stream(target)

    def read(
        self,
        target: Target,
        start: int,
        end: Optional[int],
        on_line: Callable[[bytes], None],
        should_stop: Callable[[], bool] = lambda: False,
        flush: bool = True,
    ) -> int:
        """
        Returns the number of bytes consumed. A trailing line without
        terminator at the window boundary is delivered when ``flush`` is set;
        otherwise it is kept and completed by the next read.

        Raises:
            ReadError: opening or reading the target failed
        """
        consumed = 0
        pending, self._carry = self._carry, b""
        chunks = self._chunks(target, start, end)
        try:
            while True:
                try:
                    chunk = next(chunks)
                except StopIteration:
                    break
                except (OSError, ValueError) as e:
                    # closing the handle from another thread surfaces here
                    if should_stop():
                        return consumed
                    raise ReadError(f"Failed to read target: {e}") from e
                consumed += len(chunk)
                lines, pending = self.codec.split(pending + chunk)
                for line in lines:
                    if should_stop():
                        return consumed
                    on_line(line)
        finally:
            chunks.close()

        if pending and not should_stop():
            if flush:
                on_line(pending)
            else:
                self._carry = pending
        return consumed

    def reset(self) -> None:
        """Forget any held-back partial line."""
        self._carry = b""

    def abort(self) -> None:
        """Close the open handle, if any; the running read then stops."""
        with self._lock:
            handle = self._handle
            self._handle = None
        if handle is not None:
            handle.close()
