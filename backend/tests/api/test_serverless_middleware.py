"""Tests for ServerlessPathMiddleware — scope rewriting before routing."""

from api_gateway.api.serverless import ServerlessPathMiddleware


class ScopeRecorder:
    def __init__(self):
        self.scopes: list[dict] = []

    async def __call__(self, scope, receive, send):
        self.scopes.append(scope)


async def _noop_receive():
    return {"type": "http.request"}


async def _noop_send(message):
    return None


async def test_rewrites_path_and_raw_path():
    inner = ScopeRecorder()
    middleware = ServerlessPathMiddleware(inner)
    scope = {
        "type": "http", "path": "/api/v1/status", "raw_path": b"/api/v1/status",
        "query_string": b"x=1",
    }

    await middleware(scope, _noop_receive, _noop_send)

    seen = inner.scopes[0]
    assert seen["path"] == "/v1/status"
    assert seen["raw_path"] == b"/v1/status"
    assert seen["query_string"] == b"x=1"
    assert scope["path"] == "/api/v1/status"


async def test_leaves_non_matching_paths_alone():
    inner = ScopeRecorder()
    scope = {"type": "http", "path": "/apiary", "raw_path": b"/apiary"}

    await ServerlessPathMiddleware(inner)(scope, _noop_receive, _noop_send)

    assert inner.scopes[0] is scope


async def test_ignores_lifespan_scope():
    inner = ScopeRecorder()
    scope = {"type": "lifespan"}

    await ServerlessPathMiddleware(inner, mount_prefix="/gw")(scope, _noop_receive, _noop_send)

    assert inner.scopes[0] is scope


async def test_custom_mount_prefix():
    inner = ScopeRecorder()
    scope = {"type": "http", "path": "/gw/message/Ada"}

    await ServerlessPathMiddleware(inner, mount_prefix="/gw")(scope, _noop_receive, _noop_send)

    assert inner.scopes[0]["path"] == "/message/Ada"
    assert "raw_path" not in inner.scopes[0]
