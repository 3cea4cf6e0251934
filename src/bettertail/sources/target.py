from __future__ import annotations
import errno
import io
import os
import stat
import sys
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from ..errors import InvalidTargetError


@dataclass(frozen=True)
class PathTarget:
    path: str


@dataclass(frozen=True)
class DescriptorTarget:
    fd: int


@dataclass(frozen=True)
class StreamTarget:
    stream: Any

    def read(self, size: int = -1) -> bytes:
        """Read raw bytes, whether the wrapped stream is binary or text."""
        raw = self.stream
        if isinstance(raw, io.TextIOBase) and getattr(raw, "buffer", None) is not None:
            raw = raw.buffer
        # read1 returns whatever is available instead of blocking for ``size`` bytes
        reader = getattr(raw, "read1", None) or raw.read
        chunk = reader(size)
        if isinstance(chunk, str):
            encoding = getattr(self.stream, "encoding", None) or "utf-8"
            return chunk.encode(encoding)
        return chunk or b""


Target = Union[PathTarget, DescriptorTarget, StreamTarget]


def _probe_fd(fd: Any) -> Optional[os.stat_result]:
    """fstat ``fd``; None when it is not an open descriptor (EBADF)."""
    if isinstance(fd, bool) or not isinstance(fd, int) or fd < 0:
        return None
    try:
        return os.fstat(fd)
    except OSError as e:
        if e.errno == errno.EBADF:
            return None
        raise


def get_file_descriptor(handle: Any) -> Optional[Tuple[int, os.stat_result]]:
    """Return ``(fd, stat)`` for an int descriptor or an object exposing one."""
    st = _probe_fd(handle)
    if st is not None:
        return handle, st
    if isinstance(handle, (int, str, bytes, os.PathLike)):
        return None

    fd = getattr(handle, "fd", None)
    if fd is None and callable(getattr(handle, "fileno", None)):
        try:
            fd = handle.fileno()
        except (OSError, ValueError):
            fd = None
    st = _probe_fd(fd)
    if st is not None:
        return fd, st
    return None


def _is_readable_stream(handle: Any) -> bool:
    if isinstance(handle, io.IOBase):
        return not handle.closed and handle.readable()
    return callable(getattr(handle, "read", None))


def resolve_target(target: Any) -> Tuple[Target, bool]:
    """
    Classify a handle into a Target.

    Returns (target, force_follow). No target at all means standard input,
    which is always followed.

    Raises:
        InvalidTargetError: the handle is neither path, descriptor nor stream
    """
    if target is None or target == "":
        stdin = getattr(sys.stdin, "buffer", sys.stdin)
        return StreamTarget(stdin), True

    found = get_file_descriptor(target)
    if found is not None:
        fd, st = found
        if stat.S_ISREG(st.st_mode):
            return DescriptorTarget(fd), False
        # pipes, ttys and sockets are not byte-addressable
        if isinstance(target, int):
            return StreamTarget(os.fdopen(fd, "rb", closefd=False)), False
        return StreamTarget(target), False

    if isinstance(target, (str, os.PathLike)):
        return PathTarget(os.fspath(target)), False

    if not isinstance(target, (int, bytes)) and _is_readable_stream(target):
        return StreamTarget(target), False

    raise InvalidTargetError()


def target_kind(target: Target) -> str:
    if isinstance(target, PathTarget):
        return "path"
    if isinstance(target, DescriptorTarget):
        return "fd"
    return "stream"
