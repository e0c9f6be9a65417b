import json
import logging

from reeled.core.logging_config import JsonFormatter
from reeled.core.request_context import clear_context, set_context


def _record(msg="llm_attempt", **extra):
    record = logging.LogRecord("llm", logging.WARNING, __file__, 1, msg, None, None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_json_formatter_includes_context_and_extra():
    set_context(request_id="req-1", trace_id="trace-1", model="gpt-4.1")
    try:
        line = JsonFormatter().format(_record(attempt=2, attempts=object()))
    finally:
        clear_context()

    data = json.loads(line)
    assert data["msg"] == "llm_attempt"
    assert data["level"] == "WARNING"
    assert data["request_id"] == "req-1"
    assert data["trace_id"] == "trace-1"
    assert data["model"] == "gpt-4.1"
    assert data["attempt"] == 2
    # non-serializable extras are stringified rather than dropped
    assert isinstance(data["attempts"], str)


def test_cleared_context_is_not_logged():
    clear_context()
    data = json.loads(JsonFormatter().format(_record()))
    assert "trace_id" not in data
    assert "request_id" not in data
