from __future__ import annotations
import dataclasses
import queue
import threading
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

from .config import TailOptions, validate_options
from .cursor import has_eof_newline, locate_cursor
from .encodings import get_codec
from .errors import TailError
from .logutil import make_debugger
from .retry import RetryController, check_access
from .sources.reader import LineReader, current_size, read_all
from .sources.target import PathTarget, StreamTarget, Target, resolve_target, target_kind

TRUNCATED_MARKER = "better-tail: file truncated"
EVENTS = ("line", "data", "error", "end")

Handler = Callable[..., Any]
OptionsLike = Union[TailOptions, Mapping[str, Any], None]


# mapping keys that do not share the TailOptions field name
_FIELD_NAMES = {"sleepInterval": "sleep_interval", "sleepIntervalMs": "sleep_interval"}


def _build_options(options: OptionsLike, overrides: Dict[str, Any]) -> TailOptions:
    if isinstance(options, TailOptions):
        if not overrides:
            return dataclasses.replace(options)
        # cast the overrides like any raw mapping, then apply only those fields
        checked = validate_options(overrides)
        names = {_FIELD_NAMES.get(key, key) for key in overrides}
        return dataclasses.replace(options, **{name: getattr(checked, name) for name in names})
    raw = dict(options or {})
    raw.update(overrides)
    return validate_options(raw)


class Tail:
    """
    Tails one target and reports what it reads through four events:

    - ``line``: decoded text of each line, in source byte order
    - ``data``: the same line as encoded bytes
    - ``end``: a read cycle completed (repeats while following)
    - ``error``: terminal failure; nothing is emitted afterwards

    ``run()`` drives everything in the calling thread, ``start()`` in a
    daemon thread. While following, the target is polled every
    ``sleep_interval`` seconds until ``unfollow()``.
    """
    def __init__(self, target: Any = None, options: OptionsLike = None, **overrides: Any) -> None:
        self._handlers: Dict[str, List[Handler]] = {name: [] for name in EVENTS}
        self._error: Optional[TailError] = None
        self._stop = threading.Event()
        self._reading = threading.Lock()
        self._closed = False
        self._started = False
        self._ready = False
        self._thread: Optional[threading.Thread] = None

        self.target: Optional[Target] = None
        self.cursor = 0
        self.ignore_eof_newline = True

        try:
            self.options = _build_options(options, overrides)
        except TailError as e:
            self.options = TailOptions()
            self._error = e
        self.debug = make_debugger(self.options.debug)
        self.codec = get_codec(self.options.encoding)
        self._reader = LineReader(self.codec)

        if self._error is not None:
            self.debug("Invalid options:", self._error)
            return

        self.debug("Tail target:", target)
        self.debug("Tail options:", self.options)
        try:
            self.target, force_follow = resolve_target(target)
        except (TailError, OSError) as e:
            self.debug("Failed to resolve target:", e)
            self._error = e if isinstance(e, TailError) else TailError(str(e))
            return
        if force_follow:
            self.options.follow = True
        self.debug("Target type:", target_kind(self.target))

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def follow(self) -> bool:
        return self.options.follow

    def on(self, event: str, handler: Handler) -> "Tail":
        if event not in self._handlers:
            raise ValueError(f"Unknown event: {event}")
        self._handlers[event].append(handler)
        return self

    # -------------------------
    # Emission
    # -------------------------
    def _emit(self, event: str, *args: Any) -> None:
        if self._closed:
            return
        for handler in list(self._handlers[event]):
            handler(*args)

    def _emit_line(self, raw: bytes) -> None:
        self._emit("line", self.codec.decode(raw))
        self._emit("data", raw)

    def _fail(self, err: TailError) -> None:
        self.debug("Destroy stream:", err)
        handlers = list(self._handlers["error"])
        self._shutdown()
        if not handlers:
            raise err
        for handler in handlers:
            handler(err)

    def _shutdown(self) -> None:
        self._closed = True
        self._stop.set()
        self._reader.abort()

    # -------------------------
    # Pipeline
    # -------------------------
    def _prepare(self) -> bool:
        """Check access, inspect EOF and place the cursor. False if stopped."""
        target = self.target
        if isinstance(target, StreamTarget):
            self.debug("Target is not a file: set start cursor to 0")
            self.cursor = 0
            return True

        if isinstance(target, PathTarget):
            if self.options.retry is not None:
                controller = RetryController(
                    target.path,
                    self.options.retry,
                    default_interval=self.options.sleep_interval,
                    sleep=self._stop.wait,
                    should_stop=self._stop.is_set,
                    debug=self.debug,
                )
                if not controller.wait_until_accessible():
                    return False
            else:
                self.debug("Checking target availability")
                check_access(target.path)

        content = read_all(target)
        if self.options.follow:
            self.debug("EOF will be ignored in follow mode")
        elif has_eof_newline(content, self.codec):
            self.debug("EOF is a newline")
            self.ignore_eof_newline = False
        self.cursor = self._locate(content)
        return True

    def _locate(self, content: bytes) -> int:
        return locate_cursor(
            content,
            self.options,
            self.codec,
            debug=self.debug,
        )

    def _recover_truncation(self) -> None:
        self.debug("Target data was truncated, cursor position will reset")
        self._emit("line", TRUNCATED_MARKER)
        self._emit("data", self.codec.encode(TRUNCATED_MARKER))
        self._reader.reset()
        self.cursor = self._locate(read_all(self.target))

    def _read_cycle(self, initial: bool = False) -> None:
        # Do not read if a reading is in progress
        if not self._reading.acquire(blocking=False):
            self.debug("Target is already being read")
            return
        try:
            size = current_size(self.target)
            # snapshots flush a trailing partial line, follow ticks hold it back
            flush = initial
            if size is not None and self.cursor > size:
                self._recover_truncation()
                size = current_size(self.target)
                flush = True
            if not initial and size is not None and self.cursor >= size:
                return

            self.debug(f"Read target data from byte {self.cursor} to {size}")
            consumed = self._reader.read(
                self.target, self.cursor, size, self._emit_line, self._stop.is_set, flush=flush
            )
            self.cursor += consumed
            if self._stop.is_set() or (not initial and consumed == 0):
                return
            if not self.ignore_eof_newline:
                self._emit_line(b"")
            self._emit("end")
        finally:
            self._reading.release()

    def poll(self) -> None:
        """Run one follow iteration now; no-op before the cursor is placed or while a read is in flight."""
        if self._closed or not self._ready:
            return
        try:
            self._read_cycle()
        except TailError as e:
            self._fail(e)

    def run(self) -> None:
        """
        Tail the target in the calling thread; returns after the first read
        cycle, or once unfollowed when following.

        Raises:
            TailError: only when no ``error`` handler is registered
            RuntimeError: when called twice
        """
        if self._started:
            raise RuntimeError("Tail already started")
        self._started = True
        try:
            if self._error is not None:
                raise self._error
            if not self._prepare():
                return
            # the cursor is placed; manual polls may read from here on
            self._ready = True
            self._read_cycle(initial=True)
            if self.options.follow:
                self.debug("Setup interval")
                while not self._stop.wait(self.options.sleep_interval):
                    self._read_cycle()
        except TailError as e:
            self._fail(e)
        finally:
            self._shutdown()

    def start(self) -> "Tail":
        self._thread = threading.Thread(target=self.run, name="bettertail", daemon=True)
        self._thread.start()
        return self

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def close(self) -> None:
        """Stop everything; nothing is emitted afterwards."""
        self.debug("Close tail")
        self._shutdown()

    def unfollow(self) -> None:
        """Stop following. No-op unless ``follow`` is set."""
        if not self.options.follow:
            self.debug("Not following, nothing to stop")
            return
        self.debug("Stop following")
        self._shutdown()

    def lines(self) -> Iterator[str]:
        """
        Iterate over emitted lines. Runs the tail in a background thread;
        leaving the loop early closes it.
        """
        events: "queue.Queue[tuple]" = queue.Queue()
        done = object()
        self.on("line", lambda line: events.put(("line", line)))
        self.on("error", lambda err: events.put(("error", err)))

        def _worker() -> None:
            try:
                self.run()
            finally:
                events.put((done, None))

        self._thread = threading.Thread(target=_worker, name="bettertail", daemon=True)
        self._thread.start()
        try:
            while True:
                kind, value = events.get()
                if kind is done:
                    return
                if kind == "error":
                    raise value
                yield value
        finally:
            self.close()


def create(
    target: Any = None,
    options: OptionsLike = None,
    handlers: Optional[Mapping[str, Handler]] = None,
) -> Tail:
    """Build a Tail, register ``handlers`` by event name and start it in the background."""
    tail = Tail(target, options)
    for event, handler in (handlers or {}).items():
        tail.on(event, handler)
    return tail.start()


__all__ = ["EVENTS", "TRUNCATED_MARKER", "Tail", "create"]
