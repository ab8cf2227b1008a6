"""
Tests for structured logging
"""

import json
import logging

from geofacade.logging_config import JsonFormatter, trace_id_var


def test_json_formatter_includes_trace_and_extra_fields():
    record = logging.LogRecord("geo.cache", logging.INFO, __file__, 1, "cached %s", ("city",), None)
    record.component = "geo.cache"
    record.field = "city"

    token = trace_id_var.set("trace-abc")
    try:
        entry = json.loads(JsonFormatter().format(record))
    finally:
        trace_id_var.reset(token)

    assert entry["msg"] == "cached city"
    assert entry["logger"] == "geo.cache"
    assert entry["trace_id"] == "trace-abc"
    assert entry["component"] == "geo.cache"
    assert entry["field"] == "city"
    assert "args" not in entry


def test_json_formatter_without_trace():
    record = logging.LogRecord("app", logging.WARNING, __file__, 1, "HTTP Request", (), None)
    entry = json.loads(JsonFormatter().format(record))

    assert entry["level"] == "WARNING"
    assert entry["trace_id"] is None
    assert entry["component"] == "api"
