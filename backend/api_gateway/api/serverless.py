"""Serverless Path Middleware — applies the URL normalizer before routing.

Invariants:
    - Only http scopes are rewritten; lifespan/websocket pass through untouched
    - scope["path"] and scope["raw_path"] are rewritten together
    - query_string is never touched (it lives outside the path in ASGI)
    - Applied once per request

Design Decisions:
    - Pure ASGI middleware over BaseHTTPMiddleware: routing reads scope["path"],
      so the rewrite must happen on the scope itself before the router sees it
"""

import logging

from starlette.types import ASGIApp, Receive, Scope, Send

from api_gateway.core.url_normalizer import (
    DEFAULT_MOUNT_PREFIX, normalize_serverless_path,
)

logger = logging.getLogger(__name__)


class ServerlessPathMiddleware:
    def __init__(self, app: ASGIApp, mount_prefix: str = DEFAULT_MOUNT_PREFIX):
        self.app = app
        self.mount_prefix = mount_prefix

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            path = scope["path"]
            normalized = normalize_serverless_path(path, self.mount_prefix)
            if normalized != path:
                logger.debug(
                    f"Serverless path rewritten: {path} -> {normalized}",
                    extra={"path": normalized},
                )
                scope = dict(scope)
                scope["path"] = normalized
                raw_path = scope.get("raw_path")
                if raw_path is not None:
                    scope["raw_path"] = normalize_serverless_path(
                        raw_path.decode("latin-1"), self.mount_prefix,
                    ).encode("latin-1")
        await self.app(scope, receive, send)
