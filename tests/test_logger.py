import io
import json

import pytest

from memtasks.logger import Level, Logger, parse_log_level


@pytest.mark.parametrize(
    "name, level",
    [
        ("trace", Level.TRACE),
        ("DEBUG", Level.DEBUG),
        ("Info", Level.INFO),
        ("warn", Level.WARN),
        ("error", Level.ERROR),
        ("fatal", Level.FATAL),
        ("panic", Level.PANIC),
    ],
)
def test_parse_log_level_known_names(name, level):
    assert parse_log_level(name) is level


@pytest.mark.parametrize("name", ["", "verbose", "warning"])
def test_parse_log_level_unknown_defaults_to_info(name):
    assert parse_log_level(name) is Level.INFO


def test_parsed_levels_are_ordered_by_severity():
    names = ["panic", "info", "trace", "error", "debug", "fatal", "warn"]
    parsed = sorted(parse_log_level(name) for name in names)
    assert parsed == [
        Level.TRACE,
        Level.DEBUG,
        Level.INFO,
        Level.WARN,
        Level.ERROR,
        Level.FATAL,
        Level.PANIC,
    ]


def _lines(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def test_info_writes_message_and_fields():
    stream = io.StringIO()
    logger = Logger("info", stream=stream)
    logger.info("Config loaded", {"task_id": "abc"})
    (record,) = _lines(stream)
    assert record["message"] == "Config loaded"
    assert record["level"] == "info"
    assert record["task_id"] == "abc"
    assert "time" in record


def test_messages_below_level_are_dropped():
    stream = io.StringIO()
    logger = Logger("debug", stream=stream)
    logger.trace("hidden")
    logger.debug("shown")
    records = _lines(stream)
    assert [r["message"] for r in records] == ["shown"]


def test_error_level_drops_info_and_debug():
    stream = io.StringIO()
    logger = Logger("error", stream=stream)
    logger.debug("a")
    logger.info("b")
    logger.error("c", {"error": "boom"})
    records = _lines(stream)
    assert [r["message"] for r in records] == ["c"]
    assert records[0]["error"] == "boom"


def test_trace_level_keeps_everything():
    stream = io.StringIO()
    logger = Logger(Level.TRACE, stream=stream)
    logger.trace("t")
    logger.debug("d")
    logger.info("i")
    logger.error("e")
    assert [r["level"] for r in _lines(stream)] == ["trace", "debug", "info", "error"]


def test_unserialisable_fields_are_written_as_text():
    stream = io.StringIO()
    logger = Logger("info", stream=stream)
    marker = object()
    logger.info("value", {"obj": marker})
    (record,) = _lines(stream)
    assert record["obj"] == str(marker)


def test_unknown_level_name_logs_at_info():
    stream = io.StringIO()
    logger = Logger("nonsense", stream=stream)
    logger.debug("dropped")
    logger.info("kept")
    assert [r["message"] for r in _lines(stream)] == ["kept"]