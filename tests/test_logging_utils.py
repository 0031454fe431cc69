"""Tests for structured logging."""

import json
import logging

from linkpay.logging_utils import JsonFormatter, setup_logging


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="linkpay.services.dispatcher",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Payment deferred",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    line = JsonFormatter().format(make_record(company_id=3, reason="insufficient_allowance"))
    payload = json.loads(line)

    assert payload["message"] == "Payment deferred"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "linkpay.services.dispatcher"
    assert payload["company_id"] == 3
    assert payload["reason"] == "insufficient_allowance"
    assert "lineno" not in payload


def test_setup_logging_replaces_root_handlers():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("WARNING", json_output=True)

        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
