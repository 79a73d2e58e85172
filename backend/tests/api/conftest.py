"""API test fixtures — isolated gateway apps driven through httpx.

Invariants:
    - Every test builds its own app via create_app (no shared provider state)
    - Settings come from a scrubbed environment plus per-test variables
    - Static provider unless a test injects its own

Design Decisions:
    - ASGITransport over TestClient: async end to end, same client the
      Sanity provider uses
"""

import pytest
from httpx import ASGITransport, AsyncClient

from api_gateway.config import Settings
from api_gateway.main import create_app

_SCRUBBED_ENV = (
    "ENVIRONMENT", "NODE_ENV", "API_GATEWAY_CORS_ORIGINS",
    "API_GATEWAY_CONTENT_PROVIDER", "API_GATEWAY_SERVERLESS", "VERCEL",
    "API_GATEWAY_SERVERLESS_MOUNT_PREFIX",
)


@pytest.fixture
def load_settings(monkeypatch):
    for name in _SCRUBBED_ENV:
        monkeypatch.delenv(name, raising=False)

    def _load(**env: str) -> Settings:
        env.setdefault("API_GATEWAY_CONTENT_PROVIDER", "static")
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return Settings(_env_file=None)

    return _load


@pytest.fixture
async def make_client(load_settings):
    """Factory: make_client(provider=None, **env) → AsyncClient on a fresh app."""
    clients: list[AsyncClient] = []

    async def _make(provider=None, **env: str) -> AsyncClient:
        app = create_app(load_settings(**env), content_provider=provider)
        client = AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test",
        )
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()


@pytest.fixture
async def client(make_client):
    return await make_client()
