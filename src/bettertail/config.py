from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Union
import yaml

from .encodings import VALID_ENCODINGS
from .errors import InvalidOptionError


@dataclass(frozen=True)
class Selector:
    """A byte or line count; ``from_start`` encodes the ``+N`` form."""
    count: int
    from_start: bool = False

    def __str__(self) -> str:
        return f"+{self.count}" if self.from_start else str(self.count)


@dataclass(frozen=True)
class RetryPolicy:
    # seconds; None means "use sleep_interval"
    interval: Optional[float] = None
    timeout: Optional[float] = None
    max_attempts: Optional[int] = None


@dataclass
class TailOptions:
    bytes: Optional[Selector] = None
    lines: Selector = field(default_factory=lambda: Selector(10))
    follow: bool = False
    retry: Optional[RetryPolicy] = None
    sleep_interval: float = 1.0
    encoding: str = "utf8"
    debug: Union[bool, Callable[..., Any]] = False


DEFAULTS: Dict[str, Any] = {
    "follow": False,
    "lines": 10,
    "retry": False,
    "sleep_interval": 1.0,
    "encoding": "utf8",
}


def _cast_boolean(option: str, value: Any) -> bool:
    if value in ("true", "false"):
        return value == "true"
    if not isinstance(value, bool):
        raise InvalidOptionError(option, value)
    return value


def _cast_number(option: str, value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidOptionError(option, value)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidOptionError(option, value)


def _cast_selector(option: str, value: Any) -> Selector:
    if isinstance(value, Selector):
        return value
    if isinstance(value, bool):
        raise InvalidOptionError(option, value)
    if isinstance(value, int):
        return Selector(value)
    if isinstance(value, str):
        text = value.strip()
        from_start = text.startswith("+")
        try:
            count = int(text[1:] if from_start else text)
        except ValueError:
            raise InvalidOptionError(option, value)
        return Selector(count, from_start)
    raise InvalidOptionError(option, value)


def _cast_retry(value: Any) -> Optional[RetryPolicy]:
    if isinstance(value, RetryPolicy):
        return value
    if value is None:
        return None
    if isinstance(value, (bool, str)):
        return RetryPolicy() if _cast_boolean("retry", value) else None
    if not isinstance(value, Mapping):
        raise InvalidOptionError("retry", value)

    # interval/timeout are milliseconds in the mapping form
    interval = value.get("interval")
    timeout = value.get("timeout", value.get("timeoutMs"))
    max_attempts = value.get("max", value.get("maxAttempts"))
    if interval is None and timeout is None and max_attempts is None:
        raise InvalidOptionError("retry", value)

    policy = RetryPolicy(
        interval=_cast_number("retry.interval", interval) / 1000 if interval is not None else None,
        timeout=_cast_number("retry.timeout", timeout) / 1000 if timeout is not None else None,
        max_attempts=int(_cast_number("retry.max", max_attempts)) if max_attempts is not None else None,
    )
    if policy.interval is not None and policy.interval < 0:
        raise InvalidOptionError("retry.interval", interval)
    if policy.max_attempts is not None and policy.max_attempts < 0:
        raise InvalidOptionError("retry.max", max_attempts)
    return policy


def _sleep_interval_seconds(raw: Mapping[str, Any]) -> float:
    # sleepInterval (ms) is the original vocabulary, sleep_interval is in seconds
    if "sleepInterval" in raw:
        value = _cast_number("sleepInterval", raw["sleepInterval"]) / 1000
        original = raw["sleepInterval"]
    elif "sleepIntervalMs" in raw:
        value = _cast_number("sleepIntervalMs", raw["sleepIntervalMs"]) / 1000
        original = raw["sleepIntervalMs"]
    else:
        original = raw.get("sleep_interval", DEFAULTS["sleep_interval"])
        value = _cast_number("sleep_interval", original)
    if value < 0:
        raise InvalidOptionError("sleepInterval", original)
    return value


def validate_options(options: Optional[Mapping[str, Any]] = None) -> TailOptions:
    """
    Apply defaults to a raw option mapping and validate every entry.

    Raises:
        InvalidOptionError: naming the first offending option
    """
    raw: Dict[str, Any] = dict(DEFAULTS)
    raw.update(options or {})

    unknown = set(raw) - {
        "bytes", "lines", "follow", "retry", "sleep_interval", "sleepInterval",
        "sleepIntervalMs", "encoding", "debug",
    }
    if unknown:
        name = sorted(unknown)[0]
        raise InvalidOptionError(name, raw[name])

    # bytes has no default; 0 and None both mean "not set"
    byte_selector: Optional[Selector] = None
    if raw.get("bytes") not in (None, 0, "0", ""):
        byte_selector = _cast_selector("bytes", raw["bytes"])
        if byte_selector.count < 0:
            raise InvalidOptionError("bytes", raw["bytes"])

    sleep_interval = _sleep_interval_seconds(raw)

    encoding = raw["encoding"]
    if not isinstance(encoding, str) or encoding not in VALID_ENCODINGS:
        raise InvalidOptionError("encoding", encoding)

    debug = raw.get("debug", False)
    if not callable(debug):
        debug = _cast_boolean("debug", debug) if debug is not None else False

    return TailOptions(
        bytes=byte_selector,
        lines=_cast_selector("lines", raw["lines"]),
        follow=_cast_boolean("follow", raw["follow"]),
        retry=_cast_retry(raw["retry"]),
        sleep_interval=sleep_interval,
        encoding=encoding,
        debug=debug,
    )


def read_config(path: str) -> Dict[str, Any]:
    """Raw option mapping from a YAML file (top level or a `tail:` section)."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise FileNotFoundError(
            f"Configuration file not found: {path}\n"
            f"Please ensure the file exists or specify a different config with --config"
        )
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in configuration file {path}: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping of options")

    # accept both top-level options and a `tail:` section
    section = data.get("tail", data)
    if not isinstance(section, dict):
        raise ValueError(f"Section 'tail' in {path} must be a mapping of options")
    return section


def load_options(path: str) -> TailOptions:
    return validate_options(read_config(path))


__all__ = [
    "DEFAULTS",
    "RetryPolicy",
    "Selector",
    "TailOptions",
    "load_options",
    "read_config",
    "validate_options",
]
