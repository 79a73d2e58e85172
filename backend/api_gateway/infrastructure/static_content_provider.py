"""Static Content Provider — the no-op fallback used when no CMS is configured.

Invariants:
    - name is always ProviderName.STATIC
    - List operations return [], by-slug operations return None, for every input
    - No IO, no state, never raises
"""

from api_gateway.core.domain_types import ProviderName
from api_gateway.schemas.content import (
    GatewayArticle, GatewayArticleDetail, GatewayPage, GatewayPageDetail,
)


class StaticContentProvider:
    """Serves an empty catalogue so the gateway stays up without a backend."""

    name = ProviderName.STATIC

    async def get_articles(self) -> list[GatewayArticle]:
        return []

    async def get_article_by_slug(self, slug: str) -> GatewayArticleDetail | None:
        return None

    async def get_pages(self) -> list[GatewayPage]:
        return []

    async def get_page_by_slug(self, slug: str) -> GatewayPageDetail | None:
        return None
