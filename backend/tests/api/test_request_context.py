"""Request Context — verifies correlation ids, headers, and request-scoped logging.

Invariants:
    - Every response carries x-request-id and x-correlation-id
    - Inbound non-blank x-correlation-id is propagated (trimmed)
    - Without it, correlation id equals the request id
    - Request ids are unique per request
    - Log records emitted through context.logger carry both ids
    - Records from module loggers during the request (provider retries) carry
      them too; nothing stays bound once the request is done
"""

import logging

import httpx
import pytest

from api_gateway.api.context import build_request_context
from api_gateway.config import SanityOptions
from api_gateway.infrastructure.observability import RequestIdFilter
from api_gateway.infrastructure.sanity_content_provider import SanityContentProvider


async def test_ids_echoed_on_success(client):
    res = await client.get("/v1/status")
    request_id = res.headers["x-request-id"]
    assert request_id
    assert res.headers["x-correlation-id"] == request_id


async def test_inbound_correlation_id_propagates(client):
    res = await client.get("/v1/status", headers={"x-correlation-id": "  trace-abc  "})
    assert res.headers["x-correlation-id"] == "trace-abc"
    assert res.headers["x-request-id"] != "trace-abc"


async def test_blank_correlation_header_falls_back_to_request_id(client):
    res = await client.get("/v1/status", headers={"x-correlation-id": "   "})
    assert res.headers["x-correlation-id"] == res.headers["x-request-id"]


async def test_ids_on_error_and_redirect_responses(client):
    for path in ("/v1/unknown", "/status"):
        res = await client.get(path, headers={"x-correlation-id": "trace-1"})
        assert res.headers["x-correlation-id"] == "trace-1"
        assert res.headers["x-request-id"]


async def test_request_ids_are_unique(client):
    ids = {(await client.get("/v1/status")).headers["x-request-id"] for _ in range(5)}
    assert len(ids) == 5


def test_build_request_context_binds_ids_to_logger():
    context = build_request_context("corr-1")
    assert context.correlation_id == "corr-1"
    assert context.logger.extra == {
        "request_id": context.request_id, "correlation_id": "corr-1",
    }


def test_context_logger_merges_call_site_extra(caplog):
    context = build_request_context(None)
    with caplog.at_level(logging.INFO, logger="api_gateway.request"):
        context.logger.info("hello", extra={"slug": "abc"})

    record = caplog.records[-1]
    assert record.request_id == context.request_id
    assert record.correlation_id == context.request_id
    assert record.slug == "abc"


async def test_access_log_lines_carry_ids(client, caplog):
    with caplog.at_level(logging.INFO, logger="api_gateway.request"):
        res = await client.get("/v1/status", headers={"x-correlation-id": "trace-log"})

    records = [r for r in caplog.records if r.name == "api_gateway.request"]
    messages = [r.getMessage() for r in records]
    assert "Request started" in messages
    assert "Request completed" in messages
    assert all(r.correlation_id == "trace-log" for r in records)
    completed = next(r for r in records if r.getMessage() == "Request completed")
    assert completed.status_code == 200
    assert completed.request_id == res.headers["x-request-id"]


@pytest.fixture
def id_filtered_caplog(caplog):
    request_filter = RequestIdFilter()
    caplog.handler.addFilter(request_filter)
    yield caplog
    caplog.handler.removeFilter(request_filter)


def flaky_sanity_provider() -> SanityContentProvider:
    responses = iter([httpx.Response(503), httpx.Response(200, json={"result": []})])
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: next(responses)))
    options = SanityOptions(
        project_id="proj123", dataset="production", max_retries=1, retry_delay_ms=0,
    )
    return SanityContentProvider(options, http_client=client)


async def test_provider_retry_log_carries_request_ids(make_client, id_filtered_caplog):
    client = await make_client(provider=flaky_sanity_provider())

    with id_filtered_caplog.at_level(logging.DEBUG):
        res = await client.get(
            "/v1/content/articles", headers={"x-correlation-id": "corr-1"},
        )

    assert res.status_code == 200
    retry = next(
        r for r in id_filtered_caplog.records
        if r.getMessage().startswith("Retrying Sanity request")
    )
    assert retry.name == "api_gateway.infrastructure.sanity_content_provider"
    assert retry.correlation_id == "corr-1"
    assert retry.request_id == res.headers["x-request-id"]


def test_records_outside_a_request_stay_unbound(id_filtered_caplog):
    with id_filtered_caplog.at_level(logging.INFO):
        logging.getLogger("api_gateway.test").info("outside")

    record = id_filtered_caplog.records[-1]
    assert getattr(record, "correlation_id", None) is None
    assert getattr(record, "request_id", None) is None
