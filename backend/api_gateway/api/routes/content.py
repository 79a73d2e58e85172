"""Content Routes — article and page retrieval through the ContentService.

Invariants:
    - Article list meta: {provider, count, module: "content"}
    - Page list meta: {provider, count, module: "content", resource: "page"}
    - Detail meta: {provider, slug, module: "content", resource}
    - Every successful list/detail response logs provider plus count/slug
    - Blank slug → 400 CONTENT_{ARTICLE|PAGE}_SLUG_REQUIRED, provider not called
    - Unknown slug → 404 CONTENT_{ARTICLE|PAGE}_NOT_FOUND with details.slug
    - Provider failures propagate to the error handlers/boundary unchanged

Design Decisions:
    - Not-found is an error envelope, not {data: null}: clients branch on status,
      and the static provider answers every slug the same way
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from api_gateway.api.context import RequestContext, get_request_context
from api_gateway.api.dependencies import get_content_service
from api_gateway.api.responses import send_success
from api_gateway.api.versioning import VERSION_PREFIX
from api_gateway.core.domain_types import ContentResource
from api_gateway.core.errors import ErrorCode, GatewayError
from api_gateway.services.content_service import ContentService

router = APIRouter(prefix=f"{VERSION_PREFIX}/content", tags=["content"])

_SLUG_REQUIRED = {
    ContentResource.ARTICLE: ErrorCode.CONTENT_ARTICLE_SLUG_REQUIRED,
    ContentResource.PAGE: ErrorCode.CONTENT_PAGE_SLUG_REQUIRED,
}
_NOT_FOUND = {
    ContentResource.ARTICLE: ErrorCode.CONTENT_ARTICLE_NOT_FOUND,
    ContentResource.PAGE: ErrorCode.CONTENT_PAGE_NOT_FOUND,
}


def _require_slug(slug: str, resource: ContentResource) -> str:
    normalized = slug.strip()
    if not normalized:
        raise GatewayError(
            status_code=status.HTTP_400_BAD_REQUEST, code=_SLUG_REQUIRED[resource],
        )
    return normalized


def _list_meta(
    service: ContentService, count: int, resource: ContentResource | None = None,
) -> dict:
    meta = {
        "provider": service.provider_name.value,
        "count": count,
        "module": "content",
    }
    if resource is not None:
        meta["resource"] = resource.value
    return meta


def _detail_meta(service: ContentService, slug: str, resource: ContentResource) -> dict:
    return {
        "provider": service.provider_name.value,
        "slug": slug,
        "module": "content",
        "resource": resource.value,
    }


def _not_found(slug: str, resource: ContentResource) -> GatewayError:
    return GatewayError(
        status_code=status.HTTP_404_NOT_FOUND,
        code=_NOT_FOUND[resource],
        details={"slug": slug},
    )


# ─── Articles ───────────────────────────────────────────────────

@router.get("/articles")
async def list_articles(
    request: Request,
    service: ContentService = Depends(get_content_service),
    context: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    articles = await service.get_articles()
    context.logger.info(
        "Serving content articles",
        extra={"provider": service.provider_name.value, "count": len(articles)},
    )
    return send_success(request, articles, meta=_list_meta(service, len(articles)))


@router.get("/articles/", include_in_schema=False)
async def article_slug_missing() -> JSONResponse:
    _require_slug("", ContentResource.ARTICLE)


@router.get("/articles/{slug}")
async def get_article(
    request: Request,
    slug: str,
    service: ContentService = Depends(get_content_service),
    context: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    slug = _require_slug(slug, ContentResource.ARTICLE)
    article = await service.get_article_by_slug(slug)
    if article is None:
        raise _not_found(slug, ContentResource.ARTICLE)
    context.logger.info(
        "Serving content article detail",
        extra={"provider": service.provider_name.value, "slug": article.slug},
    )
    return send_success(
        request, article,
        meta=_detail_meta(service, article.slug, ContentResource.ARTICLE),
    )


# ─── Pages ──────────────────────────────────────────────────────

@router.get("/pages")
async def list_pages(
    request: Request,
    service: ContentService = Depends(get_content_service),
    context: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    pages = await service.get_pages()
    context.logger.info(
        "Serving content pages",
        extra={"provider": service.provider_name.value, "count": len(pages)},
    )
    return send_success(
        request, pages,
        meta=_list_meta(service, len(pages), ContentResource.PAGE),
    )


@router.get("/pages/", include_in_schema=False)
async def page_slug_missing() -> JSONResponse:
    _require_slug("", ContentResource.PAGE)


@router.get("/pages/{slug}")
async def get_page(
    request: Request,
    slug: str,
    service: ContentService = Depends(get_content_service),
    context: RequestContext = Depends(get_request_context),
) -> JSONResponse:
    slug = _require_slug(slug, ContentResource.PAGE)
    page = await service.get_page_by_slug(slug)
    if page is None:
        raise _not_found(slug, ContentResource.PAGE)
    context.logger.info(
        "Serving content page detail",
        extra={"provider": service.provider_name.value, "slug": page.slug},
    )
    return send_success(
        request, page,
        meta=_detail_meta(service, page.slug, ContentResource.PAGE),
    )
