"""Response Envelope — verifies send_success/send_error shapes and the single-send guard.

Invariants:
    - Success body is {data, meta?}; meta omitted when None, data kept even when null
    - None values survive in plain payloads; only model fields drop them
    - Error body is {code, message, details?} with the error's status
    - A second send_* for the same request raises ResponseAlreadySentError
    - A second send inside a live request surfaces as a 500 error envelope
"""

import json

import pytest
from fastapi import Request

from api_gateway.api.routes import health
from api_gateway.api.responses import (
    ResponseAlreadySentError, render_error, send_error, send_success,
)
from api_gateway.core.errors import ErrorCode, GatewayError
from api_gateway.schemas.content import GatewayPage


def make_request() -> Request:
    return Request({
        "type": "http", "method": "GET", "path": "/v1/test",
        "headers": [], "query_string": b"",
    })


def body_of(response) -> dict:
    return json.loads(response.body)


def test_success_without_meta():
    response = send_success(make_request(), {"ok": True})
    assert response.status_code == 200
    assert body_of(response) == {"data": {"ok": True}}


def test_success_with_null_data_keeps_data_key():
    assert body_of(send_success(make_request(), None)) == {"data": None}


def test_success_custom_status_and_meta():
    response = send_success(make_request(), [], meta={"module": "x"}, status_code=201)
    assert response.status_code == 201
    assert body_of(response) == {"data": [], "meta": {"module": "x"}}


def test_success_rejects_non_2xx_without_consuming_the_send():
    request = make_request()
    with pytest.raises(ValueError):
        send_success(request, {}, status_code=404)
    assert send_success(request, {}).status_code == 200


def test_success_encodes_models_by_alias():
    page = GatewayPage(id="p", slug="s", title="T", updated_at="2024-01-01")
    body = body_of(send_success(make_request(), page))
    assert body == {"data": {"id": "p", "slug": "s", "title": "T", "updatedAt": "2024-01-01"}}


def test_success_keeps_none_values_in_plain_payloads():
    body = body_of(send_success(make_request(), {"a": None, "b": 1}))
    assert body == {"data": {"a": None, "b": 1}}


def test_success_drops_none_fields_only_inside_models():
    page = GatewayPage(id="p", slug="s", title="T", updated_at="2024-01-01")
    body = body_of(send_success(make_request(), {"page": page, "next": None}))
    assert body["data"]["next"] is None
    assert "subheading" not in body["data"]["page"]
    assert body["data"]["page"]["updatedAt"] == "2024-01-01"


def test_error_envelope():
    error = GatewayError(
        status_code=404, code=ErrorCode.CONTENT_PAGE_NOT_FOUND, details={"slug": "x"},
    )
    response = send_error(make_request(), error)
    assert response.status_code == 404
    assert body_of(response) == {
        "code": "CONTENT_PAGE_NOT_FOUND", "message": "Page not found", "details": {"slug": "x"},
    }


def test_second_send_is_rejected():
    request = make_request()
    send_success(request, {"ok": True})

    with pytest.raises(ResponseAlreadySentError):
        send_success(request, {"ok": True})
    with pytest.raises(ResponseAlreadySentError):
        send_error(request, GatewayError(status_code=400, code=ErrorCode.BAD_REQUEST))


def test_render_error_is_unguarded():
    request = make_request()
    send_success(request, {})
    error = GatewayError(status_code=500, code=ErrorCode.INTERNAL_SERVER_ERROR)
    assert render_error(error).status_code == 500


async def test_double_send_inside_request_becomes_internal_error(make_client, monkeypatch):
    original = health.send_success

    def send_twice(request, data, **kwargs):
        original(request, data, **kwargs)
        return original(request, data, **kwargs)

    monkeypatch.setattr(health, "send_success", send_twice)
    client = await make_client()

    res = await client.get("/v1/status")

    assert res.status_code == 500
    assert res.json()["code"] == "INTERNAL_SERVER_ERROR"
    assert res.json()["details"]["name"] == "ResponseAlreadySentError"
