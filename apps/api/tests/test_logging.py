"""
Logging configuration tests.
"""
import json
import logging

from core.logging import (
    SERVICE_NAME,
    JSONFormatter,
    RequestContextFilter,
    bind_request_id,
    current_request_id,
    reset_request_id,
)


def _record(msg="Using fallback program", **extra):
    record = logging.LogRecord("program", logging.WARNING, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_extra_fields_are_merged(self):
        record = _record(extra_fields={"source": "fallback", "days": 4})
        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Using fallback program"
        assert data["level"] == "WARNING"
        assert data["service"] == SERVICE_NAME
        assert data["source"] == "fallback"
        assert data["days"] == 4

    def test_non_json_values_are_stringified(self):
        record = _record(extra_fields={"reason": ValueError("bad")})
        data = json.loads(JSONFormatter().format(record))
        assert data["reason"] == "bad"


class TestRequestContext:

    def test_filter_stamps_bound_id(self):
        token = bind_request_id("req-1")
        try:
            record = _record()
            assert RequestContextFilter().filter(record) is True
            assert record.request_id == "req-1"
            assert json.loads(JSONFormatter().format(record))["request_id"] == "req-1"
        finally:
            reset_request_id(token)

    def test_unbound_id_is_none(self):
        record = _record()
        RequestContextFilter().filter(record)
        assert record.request_id is None

    def test_generated_id_when_missing(self):
        token = bind_request_id(None)
        try:
            assert len(current_request_id()) == 32
        finally:
            reset_request_id(token)
        assert current_request_id() is None
