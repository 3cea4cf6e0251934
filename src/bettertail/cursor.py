from __future__ import annotations

from .config import TailOptions
from .encodings import Codec
from .logutil import Debugger


def _noop(*args: object) -> None:
    return None


def locate_cursor(
    content: bytes,
    options: TailOptions,
    codec: Codec,
    *,
    debug: Debugger = _noop,
) -> int:
    """
    Translate the byte/line selection into the absolute offset of the first read.

    ``content`` is the whole current content of the target. The byte selector
    always wins over the line selector; a selector reaching past the start of
    the content selects everything.
    """
    total = len(content)

    if options.bytes is not None:
        n = options.bytes.count
        if n >= total:
            debug("Requested bytes cover the whole content, set cursor to byte 0")
            return 0
        byte = n if options.bytes.from_start else total - n
        debug(f"Set cursor to byte {byte}")
        return byte

    if options.lines.count <= 0:
        debug("Tail every line, set cursor to byte 0")
        return 0

    requested = options.lines.count
    debug(f"Search byte matching requested line: {options.lines}")

    segments = codec.count_segments(content)
    if requested >= segments:
        debug("Requested line is out of range, set cursor to byte 0")
        return 0

    # the empty segment after a trailing terminator is not a line
    remove_last = 1 if codec.ends_with_newline(content) else 0
    if options.lines.from_start:
        search_from = requested - remove_last
    else:
        search_from = segments - requested - remove_last

    if search_from < 0:
        debug("Failed to find requested line, set cursor to byte 0")
        return 0

    position = codec.prefix_length(content, search_from)
    if position is None:
        debug("Failed to find requested line, set cursor to byte 0")
        return 0

    debug(f"Set cursor to byte {position}")
    return position


def has_eof_newline(content: bytes, codec: Codec) -> bool:
    return codec.ends_with_newline(content)
