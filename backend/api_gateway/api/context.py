"""Request Context — per-request ids, bound logger, and the top-level error boundary.

Invariants:
    - Every request gets a fresh request_id before any handler runs
    - correlation_id = trimmed inbound x-correlation-id, else request_id
    - Every log line emitted during the request carries both ids: through
      context.logger directly, and from module loggers via the ids bound for
      the request in observability
    - Every response (success, redirect, error) echoes x-request-id and x-correlation-id
    - No exception escapes the boundary: it is normalized via to_gateway_error
      and rendered as an error envelope

Design Decisions:
    - Context stored on request.state and handed to handlers through a FastAPI
      dependency (get_request_context); only the ids are also bound in a
      request-scoped ContextVar, reset when the request finishes
    - Boundary wraps the exception handlers, so failures raised by the handlers
      themselves (e.g. a second send) are still normalized
"""

import logging
import time
import uuid
from dataclasses import dataclass

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from api_gateway.api.responses import render_error
from api_gateway.core.domain_types import (
    CORRELATION_ID_HEADER, REQUEST_ID_HEADER, CorrelationId, RequestId,
)
from api_gateway.core.errors import to_gateway_error
from api_gateway.infrastructure.observability import bind_request_ids, unbind_request_ids

logger = logging.getLogger("api_gateway.request")


class RequestLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges bound ids with call-site extra."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


@dataclass(frozen=True)
class RequestContext:
    request_id: RequestId
    correlation_id: CorrelationId
    logger: RequestLoggerAdapter


def build_request_context(inbound_correlation_id: str | None) -> RequestContext:
    """Create the context for one request."""
    request_id = RequestId(uuid.uuid4().hex)
    candidate = (inbound_correlation_id or "").strip()
    correlation_id = CorrelationId(candidate or request_id)
    bound = RequestLoggerAdapter(
        logger,
        {"request_id": request_id, "correlation_id": correlation_id},
    )
    return RequestContext(
        request_id=request_id, correlation_id=correlation_id, logger=bound,
    )


def get_request_context(request: Request) -> RequestContext:
    """FastAPI dependency: the context attached by RequestContextMiddleware."""
    return request.state.context


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attaches RequestContext, logs access, and normalizes unhandled failures."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        try:
            context = build_request_context(
                request.headers.get(CORRELATION_ID_HEADER),
            )
            request.state.context = context
        except Exception as exc:
            error = to_gateway_error(exc)
            logger.error(
                "Failed to attach request context",
                extra={"error_code": error.code.value},
                exc_info=True,
            )
            return render_error(error)

        token = bind_request_ids(context.request_id, context.correlation_id)
        try:
            return await self._handle(request, call_next, context, started)
        finally:
            unbind_request_ids(token)

    async def _handle(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
        context: RequestContext,
        started: float,
    ) -> Response:
        context.logger.info(
            "Request started",
            extra={"method": request.method, "path": request.url.path},
        )
        try:
            response = await call_next(request)
        except Exception as exc:
            error = to_gateway_error(exc)
            context.logger.error(
                f"Unhandled failure on {request.method} {request.url.path}: {exc!r}",
                extra={"error_code": error.code.value, "path": request.url.path},
                exc_info=exc,
            )
            response = render_error(error)

        response.headers[REQUEST_ID_HEADER] = context.request_id
        response.headers[CORRELATION_ID_HEADER] = context.correlation_id
        context.logger.info(
            "Request completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return response
