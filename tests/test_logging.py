import json
import logging

from core.logging import JsonFormatter, setup_logging


def make_record(**extra):
    record = logging.LogRecord("gateway.caller", logging.WARNING, __file__, 1, "attempt %d failed", (2,), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_lifts_context_fields():
    line = JsonFormatter().format(make_record(provider="https://a.example", attempt=2))
    entry = json.loads(line)
    assert entry["message"] == "attempt 2 failed"
    assert entry["level"] == "WARNING"
    assert entry["provider"] == "https://a.example"
    assert entry["attempt"] == 2
    assert "client" not in entry


def test_setup_logging_accepts_level_names():
    root = setup_logging("debug")
    try:
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2
        assert logging.getLogger("httpx").level == logging.WARNING
        assert setup_logging("nonsense").level == logging.INFO
    finally:
        setup_logging("INFO")
