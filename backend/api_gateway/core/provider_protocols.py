"""Boundary Protocols — the content retrieval contract between gateway and backends.

Invariants:
    - Every operation is async and total over its return type: a list (possibly
      empty) or a model/None; never a partially populated result
    - "No data" is never an error: empty list or None
    - Provider-internal failures are raised as-is; the gateway normalizes them
    - One provider instance is bound per process and shared read-only

Design Decisions:
    - Protocol over ABC: structural subtyping, providers need no common base class
      (ADR: test doubles are plain classes)
"""

from typing import Protocol

from api_gateway.core.domain_types import ProviderName
from api_gateway.schemas.content import (
    GatewayArticle, GatewayArticleDetail, GatewayPage, GatewayPageDetail,
)


class ContentProvider(Protocol):
    """Contract for article/page retrieval — implemented by infrastructure."""
    name: ProviderName

    async def get_articles(self) -> list[GatewayArticle]: ...
    async def get_article_by_slug(self, slug: str) -> GatewayArticleDetail | None: ...
    async def get_pages(self) -> list[GatewayPage]: ...
    async def get_page_by_slug(self, slug: str) -> GatewayPageDetail | None: ...
