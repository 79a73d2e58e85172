"""Status Probe — liveness endpoint under the active API version.

Invariants:
    - GET /v1/status always returns 200 {data: {ok: true}, meta: {service}} if the process is up
    - Never touches the content provider (a CMS outage must not fail liveness)
    - GET and HEAD both served; legacy /status and the bare root redirect here with 308
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, RedirectResponse

from api_gateway.api.responses import send_success
from api_gateway.api.versioning import VERSION_PREFIX, add_legacy_redirect, versioned_path
from api_gateway.core.domain_types import SERVICE_NAME

router = APIRouter(prefix=VERSION_PREFIX, tags=["health"])
legacy_router = APIRouter(tags=["health"])


@router.get("/status", status_code=status.HTTP_200_OK)
async def status_check(request: Request) -> JSONResponse:
    """Basic liveness probe. Returns 200 if the process is up."""
    return send_success(request, {"ok": True}, meta={"service": SERVICE_NAME})


router.add_api_route("/status", status_check, methods=["HEAD"], include_in_schema=False)


@legacy_router.api_route("/", methods=["GET", "HEAD"], include_in_schema=False)
async def root_redirect() -> RedirectResponse:
    return RedirectResponse(
        url=versioned_path("/status"),
        status_code=status.HTTP_308_PERMANENT_REDIRECT,
    )


add_legacy_redirect(legacy_router, "/status")
