"""Tests for structured logging."""

import json
import logging
import sys

from tablestakes.core.logging import JsonLogFormatter, request_id_context


def _record(msg="Query executed", exc_info=None, **extra):
    record = logging.LogRecord(
        name="tablestakes.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonLogFormatter:
    """Tests for JsonLogFormatter."""

    def test_single_line_json_with_extra_fields(self):
        output = JsonLogFormatter().format(_record(row_count=3))

        assert "\n" not in output
        entry = json.loads(output)
        assert entry["message"] == "Query executed"
        assert entry["severity"] == "INFO"
        assert entry["logger"] == "tablestakes.test"
        assert entry["row_count"] == 3

    def test_includes_request_id_from_context(self):
        token = request_id_context.set("req-123")
        try:
            entry = json.loads(JsonLogFormatter().format(_record()))
        finally:
            request_id_context.reset(token)

        assert entry["request_id"] == "req-123"

    def test_includes_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record(exc_info=sys.exc_info())

        entry = json.loads(JsonLogFormatter().format(record))

        assert entry["exception_type"] == "ValueError"
        assert entry["exception_message"] == "boom"
        assert "Traceback" in entry["exception"]
