"""Message Route — greeting endpoint used by the web app's smoke checks."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api_gateway.api.responses import send_success
from api_gateway.api.versioning import VERSION_PREFIX, add_legacy_redirect

router = APIRouter(prefix=VERSION_PREFIX, tags=["message"])
legacy_router = APIRouter(tags=["message"])

@router.get("/message/{name}")
async def get_message(request: Request, name: str) -> JSONResponse:
    return send_success(
        request, {"message": f"hello {name}"}, meta={"module": "message"},
    )


router.add_api_route(
    "/message/{name}", get_message, methods=["HEAD"], include_in_schema=False,
)
add_legacy_redirect(legacy_router, "/message/{name}")
