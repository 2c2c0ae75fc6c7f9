"""Tests for structured logging."""

import json
import logging

from coverdrop_app.core.observability import JSONFormatter


def test_json_formatter_includes_known_extras() -> None:
    record = logging.LogRecord("coverdrop.test", logging.INFO, __file__, 1, "Drop %s", (7,), None)
    record.entity = "drop"
    record.entity_id = 7
    record.unrelated = "ignored"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "coverdrop.test"
    assert payload["message"] == "Drop 7"
    assert payload["entity"] == "drop"
    assert payload["entity_id"] == 7
    assert "unrelated" not in payload
    assert "caller" not in payload
