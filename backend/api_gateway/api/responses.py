"""Response Envelope — the single success/error wire shape.

Invariants:
    - Success: {"data": ..., "meta"?: {...}}; meta omitted when None
    - Error: {"code", "message", "details"?} with status from GatewayError.status_code
    - At most one send_* per request; a second call raises ResponseAlreadySentError
    - Pydantic payloads encoded by alias (camelCase) with None fields dropped;
      plain dict/list payloads keep their None values

Design Decisions:
    - Guard flag on request.state (scope-shared) so route handlers and exception
      handlers see the same flag
    - render_error skips the guard: only the top-level boundary uses it, after
      the request pipeline has already failed
"""

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api_gateway.core.errors import GatewayError

_SENT_FLAG = "response_sent"


class ResponseAlreadySentError(RuntimeError):
    """A response was already produced for this request."""


def _claim(request: Request) -> None:
    if getattr(request.state, _SENT_FLAG, False):
        raise ResponseAlreadySentError(
            f"Response already sent for {request.method} {request.url.path}",
        )
    setattr(request.state, _SENT_FLAG, True)


def build_success_body(data: Any, meta: dict[str, Any] | None = None) -> dict:
    body: dict[str, Any] = {"data": data}
    if meta is not None:
        body["meta"] = meta
    return jsonable_encoder(body, by_alias=True, exclude_none=False)


def send_success(
    request: Request,
    data: Any,
    *,
    meta: dict[str, Any] | None = None,
    status_code: int = 200,
) -> JSONResponse:
    """Wrap data (and optional meta) in the success envelope."""
    if not 200 <= status_code < 300:
        raise ValueError(f"Success status must be 2xx, got {status_code}")
    _claim(request)
    return JSONResponse(
        content=build_success_body(_encode(data), meta), status_code=status_code,
    )


def send_error(request: Request, error: GatewayError) -> JSONResponse:
    """Write a GatewayError as the error envelope."""
    _claim(request)
    return render_error(error)


def render_error(error: GatewayError) -> JSONResponse:
    return JSONResponse(
        content=jsonable_encoder(error.to_response()),
        status_code=error.status_code,
    )


def _encode(data: Any) -> Any:
    """Models drop None fields; plain values pass through untouched."""
    if isinstance(data, BaseModel):
        return jsonable_encoder(data, by_alias=True, exclude_none=True)
    if isinstance(data, (list, tuple)):
        return [_encode(item) for item in data]
    if isinstance(data, dict):
        return {key: _encode(value) for key, value in data.items()}
    return data
