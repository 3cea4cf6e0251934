"""
Test cases for option validation and YAML loading.
"""
from __future__ import annotations
import pytest

from bettertail.config import RetryPolicy, Selector, TailOptions, load_options, read_config, validate_options
from bettertail.errors import InvalidOptionError


class TestValidateOptions:
    """Test defaults and casting."""

    def test_defaults(self):
        opts = validate_options()
        assert opts == TailOptions()
        assert opts.lines == Selector(10)
        assert opts.bytes is None
        assert opts.follow is False
        assert opts.retry is None
        assert opts.sleep_interval == 1.0
        assert opts.encoding == "utf8"

    def test_plus_forms(self):
        opts = validate_options({"lines": "+5", "bytes": "+12"})
        assert opts.lines == Selector(5, from_start=True)
        assert opts.bytes == Selector(12, from_start=True)

    def test_numeric_strings(self):
        opts = validate_options({"lines": "7", "bytes": "30"})
        assert opts.lines == Selector(7)
        assert opts.bytes == Selector(30)

    def test_zero_bytes_is_unset(self):
        assert validate_options({"bytes": 0}).bytes is None

    def test_boolean_strings(self):
        opts = validate_options({"follow": "true", "retry": "false"})
        assert opts.follow is True
        assert opts.retry is None

    def test_retry_true(self):
        assert validate_options({"retry": True}).retry == RetryPolicy()

    def test_retry_mapping_in_milliseconds(self):
        opts = validate_options({"retry": {"interval": 2000, "timeout": 5000, "max": 3}})
        assert opts.retry == RetryPolicy(interval=2.0, timeout=5.0, max_attempts=3)

    def test_retry_long_names(self):
        opts = validate_options({"retry": {"timeoutMs": 250, "maxAttempts": 1}})
        assert opts.retry == RetryPolicy(timeout=0.25, max_attempts=1)

    def test_sleep_interval_milliseconds(self):
        assert validate_options({"sleepInterval": 250}).sleep_interval == 0.25
        assert validate_options({"sleepIntervalMs": 500}).sleep_interval == 0.5
        assert validate_options({"sleep_interval": 0.1}).sleep_interval == 0.1

    def test_debug_callable_kept(self):
        def sink(*args):
            pass
        assert validate_options({"debug": sink}).debug is sink

    @pytest.mark.parametrize(
        "options, option",
        [
            ({"bytes": "abc"}, "bytes"),
            ({"bytes": -4}, "bytes"),
            ({"lines": {}}, "lines"),
            ({"lines": True}, "lines"),
            ({"follow": "yes"}, "follow"),
            ({"retry": {}}, "retry"),
            ({"retry": ["x"]}, "retry"),
            ({"retry": {"timeout": "soon"}}, "retry.timeout"),
            ({"retry": {"max": "many"}}, "retry.max"),
            ({"sleepInterval": "fast"}, "sleepInterval"),
            ({"encoding": "utf-32"}, "encoding"),
            ({"encoding": 8}, "encoding"),
            ({"colour": "red"}, "colour"),
        ],
    )
    def test_invalid(self, options, option):
        with pytest.raises(InvalidOptionError) as exc:
            validate_options(options)
        assert exc.value.option == option
        assert str(exc.value).startswith(f"Invalid value provided to {option} option:")


class TestLoadOptions:
    """Test YAML configuration loading."""

    def test_top_level_options(self, tmp_path):
        p = tmp_path / "tail.yaml"
        p.write_text("lines: 3\nfollow: true\nsleepInterval: 200\n")
        opts = load_options(str(p))
        assert opts.lines == Selector(3)
        assert opts.follow is True
        assert opts.sleep_interval == 0.2

    def test_tail_section(self, tmp_path):
        p = tmp_path / "tail.yaml"
        p.write_text("tail:\n  bytes: '+10'\n  retry:\n    max: 2\n")
        opts = load_options(str(p))
        assert opts.bytes == Selector(10, from_start=True)
        assert opts.retry == RetryPolicy(max_attempts=2)

    def test_empty_file(self, tmp_path):
        p = tmp_path / "tail.yaml"
        p.write_text("")
        assert load_options(str(p)) == TailOptions()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            read_config(str(tmp_path / "absent.yaml"))

    def test_invalid_yaml(self, tmp_path):
        p = tmp_path / "tail.yaml"
        p.write_text("lines: [3\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            read_config(str(p))

    def test_not_a_mapping(self, tmp_path):
        p = tmp_path / "tail.yaml"
        p.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="must contain a mapping"):
            read_config(str(p))

    def test_invalid_option_in_file(self, tmp_path):
        p = tmp_path / "tail.yaml"
        p.write_text("encoding: klingon\n")
        with pytest.raises(InvalidOptionError):
            load_options(str(p))
