"""Tests for structured log formatting."""

import io
import json
import logging
import sys

import pytest

from ecs_check.logging import JSONFormatter, TextFormatter, check_extras, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="ecs_check.check",
        level=logging.ERROR,
        pathname=__file__,
        lineno=1,
        msg="%s is invalid",
        args=("Foo(0v0)",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield root
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_check_extras_strips_prefix():
    record = _record(check_name="Foo/Without<Bar>", other="x")
    assert check_extras(record) == {"name": "Foo/Without<Bar>"}


class TestJSONFormatter:
    def test_emits_single_line_json(self):
        line = JSONFormatter().format(_record())
        assert "\n" not in line
        entry = json.loads(line)
        assert entry["level"] == "ERROR"
        assert entry["logger"] == "ecs_check.check"
        assert entry["message"] == "Foo(0v0) is invalid"
        assert "check" not in entry

    def test_groups_check_extras(self):
        entry = json.loads(JSONFormatter().format(
            _record(check_name="Foo/Without<Bar>", check_policy="invalid", other="x")
        ))
        assert entry["check"] == {"name": "Foo/Without<Bar>", "policy": "invalid"}
        assert "other" not in entry

    def test_includes_exception(self):
        record = _record()
        try:
            raise ValueError("boom")
        except ValueError:
            record.exc_info = sys.exc_info()
        entry = json.loads(JSONFormatter().format(record))
        assert "ValueError: boom" in entry["exception"]


class TestTextFormatter:
    def test_appends_sorted_extras(self):
        line = TextFormatter().format(_record(check_policy="invalid", check_name="Foo/Without<Bar>"))
        assert line.endswith(
            "ERROR ecs_check.check: Foo(0v0) is invalid [name=Foo/Without<Bar> policy=invalid]"
        )

    def test_plain_record_has_no_brackets(self):
        assert not TextFormatter().format(_record()).endswith("]")


class TestSetupLogging:
    def test_json_output(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging("json", logging.DEBUG, stream=stream)
        assert len(restore_root_logger.handlers) == 1
        assert restore_root_logger.level == logging.DEBUG

        logging.getLogger("ecs_check.test").debug("hello", extra={"check_name": "x"})
        entry = json.loads(stream.getvalue())
        assert entry["message"] == "hello"
        assert entry["check"] == {"name": "x"}

    def test_text_output_respects_level(self, restore_root_logger):
        stream = io.StringIO()
        setup_logging("text", logging.WARNING, stream=stream)

        logger = logging.getLogger("ecs_check.test")
        logger.info("hidden")
        logger.warning("shown")
        assert "hidden" not in stream.getvalue()
        assert "WARNING ecs_check.test: shown" in stream.getvalue()
