"""Content Schemas — article and page contracts served by /v1/content routes.

Invariants:
    - Wire field names are camelCase (publishedAt, seoNoIndex, ...)
    - Optional fields that are None are omitted from responses
    - Detail models extend summary models; body is a list of Portable Text blocks

Design Decisions:
    - alias_generator=to_camel with populate_by_name: Python code uses snake_case,
      clients keep the camelCase contract of the web app
    - body stays list[dict]: Portable Text is open-ended, blocks are normalized
      by the provider, not re-modelled here
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TwitterCard = Literal["summary", "summary_large_image"]


class _ContentModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True,
    )


class _SeoFields(_ContentModel):
    seo_title: str | None = None
    seo_description: str | None = None
    seo_canonical_path: str | None = None
    seo_no_follow: bool | None = None
    seo_og_title: str | None = None
    seo_og_description: str | None = None
    seo_og_image_url: str | None = None
    seo_og_image_width: int | None = None
    seo_og_image_height: int | None = None
    seo_og_image_alt: str | None = None
    seo_twitter_card: TwitterCard | None = None


class GatewayArticle(_ContentModel):
    """Article summary as listed by /v1/content/articles."""
    id: str
    title: str
    slug: str
    published_at: str
    excerpt: str = ""
    hide_from_sitemap: bool | None = None
    seo_no_index: bool | None = None
    image_url: str | None = None
    image_width: int | None = None
    image_height: int | None = None
    tags: list[str] = Field(default_factory=list)


class GatewayArticleDetail(GatewayArticle, _SeoFields):
    """Article detail with SEO metadata and Portable Text body."""
    image_alt: str | None = None
    body: list[dict[str, Any]] = Field(default_factory=list)


class GatewayPage(_ContentModel):
    """Standalone page summary as listed by /v1/content/pages."""
    id: str
    slug: str
    title: str
    subheading: str | None = None
    intro: str | None = None
    updated_at: str | None = None
    hide_from_sitemap: bool | None = None
    seo_no_index: bool | None = None


class GatewayPageDetail(GatewayPage, _SeoFields):
    """Standalone page detail with SEO metadata and Portable Text body."""
    body: list[dict[str, Any]] = Field(default_factory=list)
