"""API Versioning — current version prefix and legacy-path redirects.

Invariants:
    - Exactly one active version (v1); routing is plain path-prefix dispatch
    - Legacy paths answer 308 to "/v1" + path + "?" + query, nothing else runs
    - Redirects keep the request method and body (308, not 301)

Design Decisions:
    - Legacy redirect registered as its own route (not middleware) so the
      router matches it before the catch-all
"""

from collections.abc import Sequence
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse

from api_gateway.api.context import RequestContext, get_request_context

API_VERSION = "v1"
VERSION_PREFIX = f"/{API_VERSION}"


def versioned_path(path: str) -> str:
    """Map an unversioned path onto the active version: /status → /v1/status."""
    return VERSION_PREFIX + (path if path.startswith("/") else f"/{path}")


def redirect_target(path: str, query: str = "") -> str:
    target = versioned_path(quote(path, safe="/:@!$&'()*+,;=-._~"))
    return f"{target}?{query}" if query else target


def add_legacy_redirect(
    router: APIRouter,
    legacy_path: str,
    methods: Sequence[str] = ("GET", "HEAD"),
) -> None:
    """Register a 308 redirect from legacy_path to its versioned equivalent."""

    async def legacy_redirect(
        request: Request,
        context: RequestContext = Depends(get_request_context),
    ) -> RedirectResponse:
        path = request.scope["path"]
        location = redirect_target(
            path, request.scope.get("query_string", b"").decode("latin-1"),
        )
        context.logger.info(
            f"Legacy route redirected to {location}",
            extra={"path": path, "location": location},
        )
        return RedirectResponse(
            url=location, status_code=status.HTTP_308_PERMANENT_REDIRECT,
        )

    router.add_api_route(
        legacy_path,
        legacy_redirect,
        methods=list(methods),
        include_in_schema=False,
        name=f"legacy:{legacy_path}",
    )
