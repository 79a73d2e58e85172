"""Sanity Content Provider — GROQ-backed article/page retrieval with retry and error mapping.

Invariants:
    - Transient failures (transport errors, 408/429/5xx) retried up to max_retries,
      sleeping retry_delay_ms * attempt between attempts
    - Every attempt is bounded by request_timeout_ms
    - All upstream failures raised as GatewayError:
        timeout → 504 SANITY_UPSTREAM_TIMEOUT
        transport → 502 SANITY_UPSTREAM_NETWORK_ERROR
        non-2xx → 502 SANITY_UPSTREAM_ERROR (details.status)
        bad JSON → 502 SANITY_INVALID_RESPONSE
    - Documents missing required fields are dropped, never half-mapped
    - "Not found" is None, not an error

Design Decisions:
    - Retry lives here, not in the gateway: the core pipeline has no retry policy,
      the provider owns its upstream's failure modes
    - Query params JSON-encoded ($slug="...") as required by the Sanity HTTP API
    - httpx.AsyncClient injectable: tests swap in httpx.MockTransport
"""

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel

from api_gateway.config import SanityOptions
from api_gateway.core.domain_types import ContentResource, ProviderName
from api_gateway.core.errors import ErrorCode, GatewayError
from api_gateway.schemas.content import (
    GatewayArticle, GatewayArticleDetail, GatewayPage, GatewayPageDetail,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})
TWITTER_CARDS = frozenset({"summary", "summary_large_image"})

_IMAGE_BODY_PROJECTION = """"body": coalesce(body, [])[]{
    ...,
    _type == "image" => {
      ...,
      "asset": {
        "url": asset->url,
        "width": asset->metadata.dimensions.width,
        "height": asset->metadata.dimensions.height
      }
    }
  }"""

_SEO_PROJECTION = """"seoTitle": seo.title,
  "seoDescription": seo.description,
  "seoCanonicalPath": seo.canonicalPath,
  "seoNoIndex": seo.noIndex,
  "seoNoFollow": seo.noFollow,
  "seoOgTitle": seo.ogTitle,
  "seoOgDescription": seo.ogDescription,
  "seoOgImageUrl": seo.ogImage.asset->url,
  "seoOgImageWidth": seo.ogImage.asset->metadata.dimensions.width,
  "seoOgImageHeight": seo.ogImage.asset->metadata.dimensions.height,
  "seoOgImageAlt": seo.ogImage.alt,
  "seoTwitterCard": seo.twitterCard"""

ARTICLES_QUERY = """*[_type == "article" && defined(slug.current)] | order(publishedAt desc) {
  _id,
  title,
  "slug": slug.current,
  "publishedAt": coalesce(publishedAt, _createdAt),
  "excerpt": coalesce(excerpt, seo.description, ""),
  "hideFromSitemap": seo.hideFromSitemap,
  "seoNoIndex": seo.noIndex,
  "imageUrl": mainImage.asset->url,
  "imageWidth": mainImage.asset->metadata.dimensions.width,
  "imageHeight": mainImage.asset->metadata.dimensions.height,
  tags
}"""

ARTICLE_BY_SLUG_QUERY = f"""*[_type == "article" && slug.current == $slug][0]{{
  _id,
  title,
  "slug": slug.current,
  "publishedAt": coalesce(publishedAt, _createdAt),
  "excerpt": coalesce(excerpt, seo.description, ""),
  "hideFromSitemap": seo.hideFromSitemap,
  {_SEO_PROJECTION},
  "imageUrl": mainImage.asset->url,
  "imageWidth": mainImage.asset->metadata.dimensions.width,
  "imageHeight": mainImage.asset->metadata.dimensions.height,
  "imageAlt": mainImage.alt,
  tags,
  {_IMAGE_BODY_PROJECTION}
}}"""

PAGES_QUERY = """*[_type == "page" && defined(slug.current)] | order(_updatedAt desc) {
  _id,
  title,
  "slug": slug.current,
  subheading,
  intro,
  "updatedAt": _updatedAt,
  "hideFromSitemap": seo.hideFromSitemap,
  "seoNoIndex": seo.noIndex
}"""

PAGE_BY_SLUG_QUERY = f"""*[_type == "page" && slug.current == $slug][0]{{
  _id,
  title,
  "slug": slug.current,
  subheading,
  intro,
  "updatedAt": _updatedAt,
  "hideFromSitemap": seo.hideFromSitemap,
  {_SEO_PROJECTION},
  {_IMAGE_BODY_PROJECTION}
}}"""


# ─── Field normalizers ──────────────────────────────────────────

def _str(value: Any) -> str | None:
    """Trimmed non-empty string, else None."""
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _positive_int(value: Any) -> int | None:
    """Positive finite number rounded to int, else None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value != value or value in (float("inf"), float("-inf")) or value <= 0:
        return None
    return round(value)


def _bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def _twitter_card(value: Any) -> str | None:
    return value if value in TWITTER_CARDS else None


def _tags(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [t.strip() for t in value if isinstance(t, str) and t.strip()]


def _seo_fields(doc: dict) -> dict[str, Any]:
    return {
        "seo_title": _str(doc.get("seoTitle")),
        "seo_description": _str(doc.get("seoDescription")),
        "seo_canonical_path": _str(doc.get("seoCanonicalPath")),
        "seo_no_follow": _bool(doc.get("seoNoFollow")),
        "seo_og_title": _str(doc.get("seoOgTitle")),
        "seo_og_description": _str(doc.get("seoOgDescription")),
        "seo_og_image_url": _str(doc.get("seoOgImageUrl")),
        "seo_og_image_width": _positive_int(doc.get("seoOgImageWidth")),
        "seo_og_image_height": _positive_int(doc.get("seoOgImageHeight")),
        "seo_og_image_alt": _str(doc.get("seoOgImageAlt")),
        "seo_twitter_card": _twitter_card(doc.get("seoTwitterCard")),
    }


# ─── Portable Text ──────────────────────────────────────────────

def normalize_portable_text_block(raw: Any) -> dict[str, Any] | None:
    """Normalize one Portable Text block; None when it has no usable _type."""
    if not isinstance(raw, dict):
        return None
    block_type = raw.get("_type")
    if not isinstance(block_type, str) or not block_type:
        return None

    block = dict(raw)
    if not isinstance(block.get("_key"), str):
        block.pop("_key", None)

    if block_type == "image":
        asset = raw.get("asset") if isinstance(raw.get("asset"), dict) else {}
        url = _str(asset.get("url"))
        width = _positive_int(asset.get("width"))
        height = _positive_int(asset.get("height"))
        block["alt"] = _str(raw.get("alt"))
        if url or width or height:
            normalized = {**asset, "url": url, "width": width, "height": height}
            block["asset"] = {k: v for k, v in normalized.items() if v is not None}
        else:
            block.pop("asset", None)
        return {k: v for k, v in block.items() if v is not None}

    children = raw.get("children")
    if isinstance(children, list):
        block["children"] = [
            _normalize_span(child) for child in children
            if isinstance(child, dict)
            and child.get("_type") == "span"
            and isinstance(child.get("text"), str)
        ]
    mark_defs = raw.get("markDefs")
    if isinstance(mark_defs, list):
        block["markDefs"] = [m for m in mark_defs if isinstance(m, dict)]
    return block


def _normalize_span(child: dict) -> dict[str, Any]:
    span = dict(child)
    marks = child.get("marks")
    if isinstance(marks, list):
        span["marks"] = [m for m in marks if isinstance(m, str)]
    else:
        span.pop("marks", None)
    return span


def normalize_portable_text_body(raw: Any) -> list[dict[str, Any]]:
    if not isinstance(raw, list):
        return []
    blocks = (normalize_portable_text_block(b) for b in raw)
    return [b for b in blocks if b is not None]


# ─── Document mappers ───────────────────────────────────────────

def map_article(doc: dict) -> GatewayArticle | None:
    """Map a Sanity article summary; None if title/slug/publishedAt missing."""
    fields = _article_fields(doc)
    return GatewayArticle(**fields) if fields else None


def map_article_detail(doc: dict) -> GatewayArticleDetail | None:
    fields = _article_fields(doc)
    if not fields:
        return None
    return GatewayArticleDetail(
        **fields,
        **_seo_fields(doc),
        image_alt=_str(doc.get("imageAlt")),
        body=normalize_portable_text_body(doc.get("body")),
    )


def _article_fields(doc: dict) -> dict[str, Any] | None:
    title = _str(doc.get("title"))
    slug = _str(doc.get("slug"))
    published_at = _str(doc.get("publishedAt"))
    if not (title and slug and published_at):
        return None
    return {
        "id": str(doc.get("_id", "")),
        "title": title,
        "slug": slug,
        "published_at": published_at,
        "excerpt": _str(doc.get("excerpt")) or "",
        "hide_from_sitemap": _bool(doc.get("hideFromSitemap")),
        "seo_no_index": _bool(doc.get("seoNoIndex")),
        "image_url": _str(doc.get("imageUrl")),
        "image_width": _positive_int(doc.get("imageWidth")),
        "image_height": _positive_int(doc.get("imageHeight")),
        "tags": _tags(doc.get("tags")),
    }


def map_page(doc: dict) -> GatewayPage | None:
    """Map a Sanity page summary; None if title/slug missing."""
    fields = _page_fields(doc)
    return GatewayPage(**fields) if fields else None


def map_page_detail(doc: dict) -> GatewayPageDetail | None:
    fields = _page_fields(doc)
    if not fields:
        return None
    return GatewayPageDetail(
        **fields,
        **_seo_fields(doc),
        body=normalize_portable_text_body(doc.get("body")),
    )


def _page_fields(doc: dict) -> dict[str, Any] | None:
    title = _str(doc.get("title"))
    slug = _str(doc.get("slug"))
    if not (title and slug):
        return None
    return {
        "id": str(doc.get("_id", "")),
        "slug": slug,
        "title": title,
        "subheading": _str(doc.get("subheading")),
        "intro": _str(doc.get("intro")),
        "updated_at": _str(doc.get("updatedAt")),
        "hide_from_sitemap": _bool(doc.get("hideFromSitemap")),
        "seo_no_index": _bool(doc.get("seoNoIndex")),
    }


# ─── Provider ───────────────────────────────────────────────────

class SanityContentProvider:
    """ContentProvider backed by the Sanity HTTP query API."""

    name = ProviderName.SANITY

    def __init__(
        self,
        options: SanityOptions,
        http_client: httpx.AsyncClient | None = None,
    ):
        if not options.is_complete:
            raise ValueError("Sanity provider requires project_id and dataset")
        self.options = options
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient()

    @property
    def query_url(self) -> str:
        host = "apicdn.sanity.io" if self.options.use_cdn else "api.sanity.io"
        return (
            f"https://{self.options.project_id}.{host}"
            f"/v{self.options.api_version}/data/query/{self.options.dataset}"
        )

    async def get_articles(self) -> list[GatewayArticle]:
        docs = await self._query(ARTICLES_QUERY, ContentResource.ARTICLE)
        return self._map_many(docs, map_article, ContentResource.ARTICLE)

    async def get_article_by_slug(self, slug: str) -> GatewayArticleDetail | None:
        doc = await self._query(
            ARTICLE_BY_SLUG_QUERY, ContentResource.ARTICLE, slug=slug,
        )
        return self._map_one(doc, map_article_detail, ContentResource.ARTICLE, slug)

    async def get_pages(self) -> list[GatewayPage]:
        docs = await self._query(PAGES_QUERY, ContentResource.PAGE)
        return self._map_many(docs, map_page, ContentResource.PAGE)

    async def get_page_by_slug(self, slug: str) -> GatewayPageDetail | None:
        doc = await self._query(
            PAGE_BY_SLUG_QUERY, ContentResource.PAGE, slug=slug,
        )
        return self._map_one(doc, map_page_detail, ContentResource.PAGE, slug)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    def _map_many(
        self, docs: Any, mapper: Callable[[dict], T | None],
        resource: ContentResource,
    ) -> list[T]:
        documents = docs if isinstance(docs, list) else []
        logger.debug(
            f"Fetched {resource.value} documents from Sanity",
            extra={"provider": self.name.value, "count": len(documents)},
        )
        mapped = (mapper(d) for d in documents if isinstance(d, dict))
        return [m for m in mapped if m is not None]

    def _map_one(
        self, doc: Any, mapper: Callable[[dict], T | None],
        resource: ContentResource, slug: str,
    ) -> T | None:
        if not isinstance(doc, dict):
            logger.debug(
                f"Sanity {resource.value} not found",
                extra={"provider": self.name.value, "slug": slug},
            )
            return None
        return mapper(doc)

    async def _query(
        self, query: str, resource: ContentResource, **params: str,
    ) -> Any:
        """Run a GROQ query and return the decoded `result` member."""
        query_params = {"query": query}
        for key, value in params.items():
            query_params[f"${key}"] = json.dumps(value)
        response = await self._fetch(query_params, resource)
        try:
            payload = response.json()
        except ValueError:
            raise GatewayError(
                status_code=502, code=ErrorCode.SANITY_INVALID_RESPONSE,
            )
        if not isinstance(payload, dict):
            raise GatewayError(
                status_code=502, code=ErrorCode.SANITY_INVALID_RESPONSE,
            )
        return payload.get("result")

    async def _fetch(
        self, query_params: dict[str, str], resource: ContentResource,
    ) -> httpx.Response:
        """GET with per-attempt timeout and linear-backoff retry."""
        headers = {"accept": "application/json"}
        if self.options.read_token:
            headers["authorization"] = f"Bearer {self.options.read_token}"
        timeout = self.options.request_timeout_ms / 1000
        max_attempts = max(1, self.options.max_retries + 1)

        for attempt in range(1, max_attempts + 1):
            try:
                response = await self.client.get(
                    self.query_url, params=query_params,
                    headers=headers, timeout=timeout,
                )
            except httpx.TransportError as e:
                is_timeout = isinstance(e, httpx.TimeoutException)
                if attempt < max_attempts:
                    logger.warning(
                        "Retrying Sanity request after transport error",
                        extra={
                            "attempt": attempt,
                            "reason": "timeout" if is_timeout else "network",
                            "resource": resource.value,
                        },
                    )
                    await self._sleep(attempt)
                    continue
                raise self._transport_error(is_timeout, resource) from e

            if response.is_success:
                return response

            if attempt < max_attempts and response.status_code in RETRYABLE_STATUS_CODES:
                logger.warning(
                    "Retrying Sanity request after upstream response error",
                    extra={
                        "attempt": attempt,
                        "status_code": response.status_code,
                        "resource": resource.value,
                    },
                )
                await self._sleep(attempt)
                continue

            raise GatewayError(
                status_code=502,
                code=ErrorCode.SANITY_UPSTREAM_ERROR,
                message=f"Sanity {resource.value} request failed",
                details={"status": response.status_code},
            )

        raise GatewayError(status_code=502, code=ErrorCode.SANITY_UPSTREAM_ERROR)

    async def _sleep(self, attempt: int) -> None:
        delay_ms = self.options.retry_delay_ms * attempt
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000)

    @staticmethod
    def _transport_error(is_timeout: bool, resource: ContentResource) -> GatewayError:
        if is_timeout:
            return GatewayError(
                status_code=504,
                code=ErrorCode.SANITY_UPSTREAM_TIMEOUT,
                message=f"Sanity {resource.value} request timed out",
            )
        return GatewayError(
            status_code=502,
            code=ErrorCode.SANITY_UPSTREAM_NETWORK_ERROR,
            message=f"Sanity {resource.value} request could not reach the upstream",
        )
