"""Catch-all Route — every unmatched method/path resolves to 404 ROUTE_NOT_FOUND.

Invariants:
    - Must be included last: it matches any path for any method
    - Message derived from method + normalized path: "Route GET /v1/unknown not found"
"""

from fastapi import APIRouter, Request, status

from api_gateway.core.errors import ErrorCode, GatewayError

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

router = APIRouter(tags=["not-found"])


@router.api_route("/{full_path:path}", methods=ALL_METHODS, include_in_schema=False)
async def route_not_found(request: Request, full_path: str):
    raise GatewayError(
        status_code=status.HTTP_404_NOT_FOUND,
        code=ErrorCode.ROUTE_NOT_FOUND,
        message=f"Route {request.method} {request.url.path} not found",
    )
