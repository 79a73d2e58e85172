"""Provider Registry — selects and builds the process-wide ContentProvider.

Invariants:
    - Called once at application start; the result is injected, never read from a global
    - "static" always yields StaticContentProvider
    - "sanity" with project id + dataset yields SanityContentProvider
    - Incomplete Sanity config degrades to static with a warning, except in
      production when only NEXT_PUBLIC_* values are present (fail fast)

Design Decisions:
    - Name → factory mapping over if/else chains: adding a provider is one entry
    - Degrade-to-static keeps the gateway servable without CMS credentials;
      the production exception catches a deploy that forgot server-side env
"""

import logging
from collections.abc import Callable

from api_gateway.config import Settings
from api_gateway.core.domain_types import ProviderName
from api_gateway.core.provider_protocols import ContentProvider
from api_gateway.infrastructure.sanity_content_provider import SanityContentProvider
from api_gateway.infrastructure.static_content_provider import StaticContentProvider

logger = logging.getLogger(__name__)


class ProviderConfigurationError(RuntimeError):
    """Raised at startup when the configured provider cannot be built safely."""


def _build_static(settings: Settings) -> ContentProvider:
    return StaticContentProvider()


def _build_sanity(settings: Settings) -> ContentProvider:
    options = settings.sanity_options()
    if options.is_complete:
        logger.info(
            "Using Sanity content provider",
            extra={"provider": ProviderName.SANITY.value},
        )
        return SanityContentProvider(options)

    if settings.is_production and settings.has_public_sanity_env:
        raise ProviderConfigurationError(
            "SANITY_PROJECT_ID and SANITY_DATASET must be set in production; "
            "NEXT_PUBLIC_SANITY_* values are not used by the API gateway there",
        )

    logger.warning(
        "Sanity configuration incomplete, falling back to static content provider",
        extra={"provider": ProviderName.STATIC.value},
    )
    return StaticContentProvider()


PROVIDER_FACTORIES: dict[ProviderName, Callable[[Settings], ContentProvider]] = {
    ProviderName.STATIC: _build_static,
    ProviderName.SANITY: _build_sanity,
}


def create_content_provider(settings: Settings) -> ContentProvider:
    """Build the ContentProvider selected by settings.content_provider."""
    return PROVIDER_FACTORIES[settings.content_provider](settings)
