"""Error Handlers — exception handlers that map known failures to error envelopes.

Invariants:
    - GatewayError → its own status/code/message/details
    - RequestValidationError → 400 VALIDATION_ERROR with field-level details
    - Starlette HTTPException → registry code chosen by status
    - Anything else is left to the RequestContextMiddleware boundary
      (to_gateway_error → 500 INTERNAL_SERVER_ERROR)

Design Decisions:
    - No catch-all Exception handler here: Starlette routes those to
      ServerErrorMiddleware, outside the request context; the gateway boundary
      handles them instead so ids and logging stay attached
    - Extracted from main.py (ADR: import fan-out < 10)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api_gateway.api.responses import send_error
from api_gateway.core.errors import ErrorCode, GatewayError

logger = logging.getLogger(__name__)

_HTTP_STATUS_CODES: dict[int, ErrorCode] = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.BAD_REQUEST,
    status.HTTP_404_NOT_FOUND: ErrorCode.ROUTE_NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: ErrorCode.METHOD_NOT_ALLOWED,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all gateway exception handlers on the FastAPI app."""
    _register_gateway_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_exception_handler(app)


def _register_gateway_error_handler(app: FastAPI) -> None:

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        """Handle errors raised deliberately by handlers and providers."""
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            f"GatewayError: {exc.message}",
            extra={
                "error_code": exc.code.value,
                "status_code": exc.status_code,
                "path": request.url.path,
                **_request_ids(request),
            },
        )
        return send_error(request, exc)


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra=_request_ids(request),
        )
        return send_error(request, _build_validation_error(exc))


def _register_http_exception_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException,
    ):
        """Map framework HTTP exceptions onto registry codes."""
        code = _HTTP_STATUS_CODES.get(exc.status_code)
        if code is None:
            code = (
                ErrorCode.BAD_REQUEST if exc.status_code < 500
                else ErrorCode.INTERNAL_SERVER_ERROR
            )
        message = None
        if code is ErrorCode.ROUTE_NOT_FOUND:
            message = f"Route {request.method} {request.url.path} not found"
        response = send_error(
            request,
            GatewayError(status_code=exc.status_code, code=code, message=message),
        )
        if exc.headers:
            response.headers.update(exc.headers)
        return response


def _build_validation_error(exc: RequestValidationError) -> GatewayError:
    return GatewayError(
        status_code=status.HTTP_400_BAD_REQUEST,
        code=ErrorCode.VALIDATION_ERROR,
        details=[
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ],
    )


def _request_ids(request: Request) -> dict:
    context = getattr(request.state, "context", None)
    if context is None:
        return {}
    return {
        "request_id": context.request_id,
        "correlation_id": context.correlation_id,
    }
