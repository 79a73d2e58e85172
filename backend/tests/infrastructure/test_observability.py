"""Tests for structured logging — JSON records carry request and content fields."""

import json
import logging
import sys

from api_gateway.infrastructure.observability import (
    JSONFormatter, RequestIdFilter, bind_request_ids, setup_logging,
    unbind_request_ids,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="api_gateway.request", level=logging.INFO, pathname=__file__,
        lineno=1, msg="Request completed", args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_core_fields():
    payload = json.loads(JSONFormatter().format(make_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "api_gateway.request"
    assert payload["message"] == "Request completed"
    assert "timestamp" in payload


def test_json_formatter_surfaces_known_extras_only():
    record = make_record(
        request_id="r1", correlation_id="c1", status_code=200,
        duration_ms=1.5, provider="static", secret="hidden",
    )
    payload = json.loads(JSONFormatter().format(record))
    assert payload["request_id"] == "r1"
    assert payload["correlation_id"] == "c1"
    assert payload["status_code"] == 200
    assert payload["duration_ms"] == 1.5
    assert payload["provider"] == "static"
    assert "secret" not in payload


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad")
    except ValueError:
        record = logging.LogRecord(
            name="x", level=logging.ERROR, pathname=__file__, lineno=1,
            msg="failed", args=(), exc_info=sys.exc_info(),
        )
    payload = json.loads(JSONFormatter().format(record))
    assert "ValueError: bad" in payload["exception"]


def test_setup_logging_installs_single_handler():
    before = list(logging.root.handlers)
    level = logging.root.level
    try:
        setup_logging("DEBUG", "json")
        setup_logging("WARNING", "text")
        ours = [h for h in logging.root.handlers if h.get_name() == "api_gateway"]
        assert len(ours) == 1
        assert not isinstance(ours[0].formatter, JSONFormatter)
        assert logging.root.level == logging.WARNING
        assert any(isinstance(f, RequestIdFilter) for f in ours[0].filters)
    finally:
        for handler in list(logging.root.handlers):
            if handler not in before:
                logging.root.removeHandler(handler)
        logging.root.setLevel(level)


def test_request_id_filter_stamps_bound_ids():
    record = logging.LogRecord(
        name="api_gateway.infrastructure.sanity_content_provider",
        level=logging.WARNING, pathname=__file__, lineno=1,
        msg="Retrying Sanity request", args=(), exc_info=None,
    )
    token = bind_request_ids("req-1", "corr-1")
    try:
        assert RequestIdFilter().filter(record) is True
    finally:
        unbind_request_ids(token)

    assert record.request_id == "req-1"
    assert record.correlation_id == "corr-1"


def test_request_id_filter_keeps_explicit_ids():
    record = make_record(request_id="own", correlation_id="own-corr")
    token = bind_request_ids("req-1", "corr-1")
    try:
        RequestIdFilter().filter(record)
    finally:
        unbind_request_ids(token)

    assert record.request_id == "own"
    assert record.correlation_id == "own-corr"


def test_request_id_filter_without_bound_ids_leaves_record_alone():
    record = make_record()
    RequestIdFilter().filter(record)
    assert getattr(record, "request_id", None) is None
