"""API Gateway — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery); catch-all always last
    - One ContentProvider bound per app at creation time, injected into ContentService
    - Middleware order (outer → inner): CORS, serverless path normalizer (when
      enabled), request context/error boundary, exception handlers, router
    - CORS configured from settings (not hardcoded); credentials only for an
      explicit origin list, never alongside the "*" wildcard

Design Decisions:
    - create_app factory over a module-level-only app: tests build isolated apps
      with injected settings/providers (ADR: no global provider state)
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api_gateway.api.context import RequestContextMiddleware
from api_gateway.api.error_handlers import register_error_handlers
from api_gateway.api.routes import content, health, message, not_found
from api_gateway.api.serverless import ServerlessPathMiddleware
from api_gateway.config import Settings, get_settings
from api_gateway.core.domain_types import (
    CORRELATION_ID_HEADER, REQUEST_ID_HEADER, SERVICE_NAME,
)
from api_gateway.core.provider_protocols import ContentProvider
from api_gateway.infrastructure.observability import setup_logging
from api_gateway.infrastructure.provider_registry import create_content_provider
from api_gateway.services.content_service import ContentService

logger = logging.getLogger(__name__)

CORS_ALLOWED_METHODS = ["GET", "HEAD", "OPTIONS"]
CORS_ALLOWED_HEADERS = ["accept", "content-type", "authorization", CORRELATION_ID_HEADER]
CORS_EXPOSED_HEADERS = [CORRELATION_ID_HEADER, REQUEST_ID_HEADER]


def resolve_cors_origins(settings: Settings) -> list[str]:
    """Explicit origins win; production otherwise allows none, elsewhere all."""
    if settings.cors_origins:
        return list(settings.cors_origins)
    if settings.is_production:
        return []
    return ["*"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    logger.info(
        "API gateway started",
        extra={
            "provider": app.state.content_service.provider_name.value,
            "service": SERVICE_NAME,
        },
    )
    yield
    logger.info("API gateway shutting down")
    aclose = getattr(app.state.content_provider, "aclose", None)
    if aclose is not None:
        await aclose()


def create_app(
    settings: Settings | None = None,
    content_provider: ContentProvider | None = None,
) -> FastAPI:
    """Build the gateway application."""
    settings = settings or get_settings()
    provider = content_provider or create_content_provider(settings)

    app = FastAPI(
        title="API Gateway",
        version="1.0.0",
        lifespan=lifespan,
        openapi_url="/openapi/json",
        docs_url="/openapi",
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.content_provider = provider
    app.state.content_service = ContentService(provider)

    origins = resolve_cors_origins(settings)
    # Added inner → outer: the last middleware added runs first
    app.add_middleware(RequestContextMiddleware)
    if settings.serverless:
        app.add_middleware(
            ServerlessPathMiddleware, mount_prefix=settings.serverless_mount_prefix,
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=bool(origins) and "*" not in origins,
        allow_methods=CORS_ALLOWED_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
        expose_headers=CORS_EXPOSED_HEADERS,
    )

    register_error_handlers(app)

    # Explicit registration; catch-all must stay last
    app.include_router(health.router)
    app.include_router(message.router)
    app.include_router(content.router)
    app.include_router(health.legacy_router)
    app.include_router(message.legacy_router)
    app.include_router(not_found.router)
    return app


app = create_app()
