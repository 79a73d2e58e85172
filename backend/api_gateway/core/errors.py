"""Error Model — the closed error-code registry, GatewayError, and the failure normalizer.

Invariants:
    - Every failure that reaches the transport is exactly one GatewayError
    - GatewayError is read-only after construction
    - Error codes come from ErrorCode only; the set is versioned by ERROR_CODES_VERSION
    - to_gateway_error() never raises and never double-wraps
    - Internal-error messages on the wire are the fixed registry text; the original
      failure's name/message live in details for diagnostics only

Design Decisions:
    - Single GatewayError type with a code field over a subclass per failure
      (ADR: the wire contract is a flat {code, message, details?} object)
    - Failure classification by shape (name/message), not by exception type,
      so provider SDK errors and plain objects narrow the same way
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any

ERROR_CODES_VERSION = 1


class ErrorCode(str, Enum):
    """Machine-readable error codes exposed to API clients."""
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    ROUTE_NOT_FOUND = "ROUTE_NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONTENT_ARTICLE_SLUG_REQUIRED = "CONTENT_ARTICLE_SLUG_REQUIRED"
    CONTENT_ARTICLE_NOT_FOUND = "CONTENT_ARTICLE_NOT_FOUND"
    CONTENT_PAGE_SLUG_REQUIRED = "CONTENT_PAGE_SLUG_REQUIRED"
    CONTENT_PAGE_NOT_FOUND = "CONTENT_PAGE_NOT_FOUND"
    SANITY_UPSTREAM_ERROR = "SANITY_UPSTREAM_ERROR"
    SANITY_UPSTREAM_TIMEOUT = "SANITY_UPSTREAM_TIMEOUT"
    SANITY_UPSTREAM_NETWORK_ERROR = "SANITY_UPSTREAM_NETWORK_ERROR"
    SANITY_INVALID_RESPONSE = "SANITY_INVALID_RESPONSE"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INTERNAL_SERVER_ERROR: "Internal server error",
    ErrorCode.ROUTE_NOT_FOUND: "Route not found",
    ErrorCode.METHOD_NOT_ALLOWED: "Method not allowed",
    ErrorCode.BAD_REQUEST: "Bad request",
    ErrorCode.VALIDATION_ERROR: "Invalid request data",
    ErrorCode.CONTENT_ARTICLE_SLUG_REQUIRED: "Article slug is required",
    ErrorCode.CONTENT_ARTICLE_NOT_FOUND: "Article not found",
    ErrorCode.CONTENT_PAGE_SLUG_REQUIRED: "Page slug is required",
    ErrorCode.CONTENT_PAGE_NOT_FOUND: "Page not found",
    ErrorCode.SANITY_UPSTREAM_ERROR: "Sanity content request failed",
    ErrorCode.SANITY_UPSTREAM_TIMEOUT: "Sanity content request timed out",
    ErrorCode.SANITY_UPSTREAM_NETWORK_ERROR: "Sanity content request could not reach the upstream",
    ErrorCode.SANITY_INVALID_RESPONSE: "Sanity returned an invalid response payload",
}


class GatewayError(Exception):
    """Normalized gateway failure carrying an HTTP status and a registry code."""

    def __init__(
        self,
        *,
        status_code: int,
        code: ErrorCode,
        message: str | None = None,
        details: Any = None,
    ):
        if not 100 <= status_code <= 599:
            raise ValueError(f"Invalid HTTP status code: {status_code}")
        resolved_message = message or ERROR_MESSAGES[code]
        super().__init__(resolved_message)
        object.__setattr__(self, "_status_code", status_code)
        object.__setattr__(self, "_code", ErrorCode(code))
        object.__setattr__(self, "_message", resolved_message)
        object.__setattr__(
            self, "_details",
            dict(details) if isinstance(details, Mapping) else details,
        )
        object.__setattr__(self, "_frozen", True)

    def __setattr__(self, name: str, value: Any) -> None:
        # Exception machinery assigns dunder attributes while raising.
        if getattr(self, "_frozen", False) and not name.startswith("__"):
            raise AttributeError(f"GatewayError is immutable: cannot set {name!r}")
        object.__setattr__(self, name, value)

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def code(self) -> ErrorCode:
        return self._code

    @property
    def message(self) -> str:
        return self._message

    @property
    def details(self) -> Any:
        return self._details

    def to_response(self) -> dict:
        """Wire payload: {code, message, details?}. details omitted when absent."""
        payload: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload

    def __repr__(self) -> str:
        return (
            f"GatewayError(status_code={self.status_code}, "
            f"code={self.code.value!r}, message={self.message!r})"
        )


def internal_error(details: Any = None) -> GatewayError:
    """Build the fixed 500 internal-error GatewayError."""
    return GatewayError(
        status_code=500,
        code=ErrorCode.INTERNAL_SERVER_ERROR,
        details=details,
    )


def to_gateway_error(failure: object) -> GatewayError:
    """Convert any failure value into a GatewayError.

    GatewayError passes through unchanged. Error-like values keep their
    name/message in details; everything else becomes a bare internal error.
    """
    if isinstance(failure, GatewayError):
        return failure
    shape = _error_shape(failure)
    if shape is None:
        return internal_error()
    name, message = shape
    return internal_error({"name": name, "message": message})


def _error_shape(failure: object) -> tuple[str, str] | None:
    """Extract (name, message) from an error-like value, or None."""
    try:
        if isinstance(failure, BaseException):
            return type(failure).__name__, str(failure)
        if isinstance(failure, Mapping):
            name, message = failure.get("name"), failure.get("message")
        else:
            name = getattr(failure, "name", None)
            message = getattr(failure, "message", None)
    except Exception:  # hostile __str__/__getattr__/__getitem__ implementations
        return None
    if isinstance(name, str) and isinstance(message, str):
        return name, message
    return None
