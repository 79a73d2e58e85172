"""Content Service — provider-agnostic content API consumed by route handlers.

Invariants:
    - Bound to exactly one ContentProvider for its lifetime
    - Pure delegation: no transformation, retry, caching, or timeout of its own
    - Provider failures propagate unchanged to the error boundary
"""

from api_gateway.core.domain_types import ProviderName
from api_gateway.core.provider_protocols import ContentProvider
from api_gateway.schemas.content import (
    GatewayArticle, GatewayArticleDetail, GatewayPage, GatewayPageDetail,
)


class ContentService:
    """Re-exposes the bound provider's operations under a stable contract."""

    def __init__(self, provider: ContentProvider):
        self._provider = provider

    @property
    def provider_name(self) -> ProviderName:
        return self._provider.name

    async def get_articles(self) -> list[GatewayArticle]:
        return await self._provider.get_articles()

    async def get_article_by_slug(self, slug: str) -> GatewayArticleDetail | None:
        return await self._provider.get_article_by_slug(slug)

    async def get_pages(self) -> list[GatewayPage]:
        return await self._provider.get_pages()

    async def get_page_by_slug(self, slug: str) -> GatewayPageDetail | None:
        return await self._provider.get_page_by_slug(slug)
