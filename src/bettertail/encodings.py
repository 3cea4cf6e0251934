"""Encoding support.

Encodings are named the way the option vocabulary names them (``utf8``,
``ucs2``, ``hex`` ...). Line splitting always happens on raw bytes so that
cursor arithmetic stays exact: a terminator is ``\\n`` or ``\\r\\n`` encoded in
the source charset and aligned on a code unit boundary. ``hex`` and ``base64``
are binary-to-text renderings: the source is split on raw ``\\n`` bytes and
each line is rendered in that textual form.
"""
from __future__ import annotations
import base64
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple


VALID_ENCODINGS = (
    "utf8",
    "utf16le",
    "latin1",
    "base64",
    "hex",
    "ascii",
    "binary",
    "ucs2",
)

_PYTHON_CODECS = {
    "utf8": "utf-8",
    "utf16le": "utf-16-le",
    "ucs2": "utf-16-le",
    "latin1": "latin-1",
    "binary": "latin-1",
    "ascii": "ascii",
    "hex": "latin-1",
    "base64": "latin-1",
}


@dataclass(frozen=True)
class Codec:
    name: str
    python_name: str
    newline: bytes
    carriage_return: bytes

    @property
    def unit(self) -> int:
        return len(self.newline)

    def decode(self, raw: bytes) -> str:
        """Render one line of raw bytes as the text delivered on ``line``."""
        if self.name == "hex":
            return raw.hex()
        if self.name == "base64":
            return base64.b64encode(raw).decode("ascii")
        return raw.decode(self.python_name, errors="replace")

    def encode(self, text: str) -> bytes:
        return text.encode(self.python_name, errors="replace")

    def _find_newline(self, buf: bytes, start: int) -> int:
        idx = buf.find(self.newline, start)
        while idx != -1 and (idx - start) % self.unit:
            idx = buf.find(self.newline, idx + 1)
        return idx

    def terminators(self, buf: bytes, start: int = 0) -> Iterator[Tuple[int, int]]:
        """Yield ``(line_end, next_start)`` for every terminated line in ``buf``.

        ``line_end`` excludes the terminator, ``next_start`` is the offset just
        after it.
        """
        pos = start
        while True:
            idx = self._find_newline(buf, pos)
            if idx == -1:
                return
            end = idx
            cr = len(self.carriage_return)
            if end - cr >= pos and buf[end - cr:end] == self.carriage_return:
                end -= cr
            yield end, idx + self.unit
            pos = idx + self.unit

    def split(self, buf: bytes) -> Tuple[List[bytes], bytes]:
        """Split ``buf`` into complete lines and the unterminated remainder."""
        lines: List[bytes] = []
        pos = 0
        for end, nxt in self.terminators(buf):
            lines.append(buf[pos:end])
            pos = nxt
        return lines, buf[pos:]

    def count_segments(self, buf: bytes) -> int:
        """Number of segments ``buf`` splits into (terminators + 1)."""
        return sum(1 for _ in self.terminators(buf)) + 1

    def prefix_length(self, buf: bytes, lines: int) -> Optional[int]:
        """Byte length of the first ``lines`` terminated lines, or None."""
        if lines <= 0:
            return 0
        seen = 0
        for _, nxt in self.terminators(buf):
            seen += 1
            if seen == lines:
                return nxt
        return None

    def ends_with_newline(self, buf: bytes) -> bool:
        if not buf or len(buf) < self.unit:
            return False
        tail = len(buf) - self.unit
        return tail % self.unit == 0 and buf[tail:] == self.newline


def get_codec(name: str) -> Codec:
    try:
        python_name = _PYTHON_CODECS[name]
    except KeyError:
        raise ValueError(f"Unsupported encoding: {name}")
    split_name = "latin-1" if name in ("hex", "base64") else python_name
    return Codec(
        name=name,
        python_name=python_name,
        newline="\n".encode(split_name),
        carriage_return="\r".encode(split_name),
    )


__all__ = ["VALID_ENCODINGS", "Codec", "get_codec"]
