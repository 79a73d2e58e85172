"""Domain Types — identifiers and enums shared across the gateway.

Invariants:
    - Provider identifiers form a closed set (ProviderName)
    - Runtime environments form a closed set (RuntimeEnvironment)
    - All header names are lower-case (ASGI header convention)

Design Decisions:
    - str Enums: serialize to JSON and compare against env strings without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

RequestId = NewType("RequestId", str)
CorrelationId = NewType("CorrelationId", str)


# ─── Enums ───────────────────────────────────────────────────────

class ProviderName(str, Enum):
    """Content provider identifiers — one is bound per process."""
    SANITY = "sanity"
    STATIC = "static"


class RuntimeEnvironment(str, Enum):
    """Deployment environment of the gateway process."""
    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


class ContentResource(str, Enum):
    """Content resource families served under /v1/content."""
    ARTICLE = "article"
    PAGE = "page"


# ─── HTTP constants ──────────────────────────────────────────────

SERVICE_NAME = "api-gateway"
CORRELATION_ID_HEADER = "x-correlation-id"
REQUEST_ID_HEADER = "x-request-id"
