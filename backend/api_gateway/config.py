"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Malformed or out-of-range numeric values fall back to their defaults
      instead of failing startup
    - NEXT_PUBLIC_SANITY_* values are only honoured outside production

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Env names match the web app's deployment (PORT/API_PORT, NODE_ENV, SANITY_*),
      so one .env serves both processes
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from api_gateway.core.domain_types import ProviderName, RuntimeEnvironment

DEFAULT_API_PORT = 5001
DEFAULT_SANITY_API_VERSION = "2025-02-19"
DEFAULT_SANITY_REQUEST_TIMEOUT_MS = 8_000
DEFAULT_SANITY_REQUEST_MAX_RETRIES = 1
DEFAULT_SANITY_REQUEST_RETRY_DELAY_MS = 250

_TRUTHY = {"1", "true", "yes", "on"}


def _bounded_int(value: object, default: int, minimum: int, maximum: int) -> int:
    """Parse an int, returning default when malformed or outside [minimum, maximum]."""
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    if parsed < minimum or parsed > maximum:
        return default
    return parsed


@dataclass(frozen=True)
class SanityOptions:
    """Resolved Sanity connection options. project_id/dataset may be missing."""
    project_id: str | None
    dataset: str | None
    api_version: str = DEFAULT_SANITY_API_VERSION
    read_token: str | None = None
    use_cdn: bool = True
    request_timeout_ms: int = DEFAULT_SANITY_REQUEST_TIMEOUT_MS
    max_retries: int = DEFAULT_SANITY_REQUEST_MAX_RETRIES
    retry_delay_ms: int = DEFAULT_SANITY_REQUEST_RETRY_DELAY_MS

    @property
    def is_complete(self) -> bool:
        return bool(self.project_id and self.dataset)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Runtime
    environment: RuntimeEnvironment = Field(
        RuntimeEnvironment.DEVELOPMENT,
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
    )
    port: int = Field(
        DEFAULT_API_PORT, validation_alias=AliasChoices("PORT", "API_PORT"),
    )

    # API
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        validation_alias=AliasChoices("API_GATEWAY_CORS_ORIGINS"),
    )
    content_provider: ProviderName = Field(
        ProviderName.SANITY,
        validation_alias=AliasChoices("API_GATEWAY_CONTENT_PROVIDER"),
    )

    # Serverless host (path-rewriting proxy mounts the gateway under a prefix)
    serverless: bool = Field(
        False, validation_alias=AliasChoices("API_GATEWAY_SERVERLESS", "VERCEL"),
    )
    serverless_mount_prefix: str = Field(
        "/api", validation_alias=AliasChoices("API_GATEWAY_SERVERLESS_MOUNT_PREFIX"),
    )

    # Sanity (server-side)
    sanity_project_id: str | None = None
    sanity_dataset: str | None = None
    sanity_api_version: str | None = None
    sanity_api_read_token: str | None = None
    sanity_use_cdn: bool = True
    sanity_request_timeout_ms: int = DEFAULT_SANITY_REQUEST_TIMEOUT_MS
    sanity_request_max_retries: int = DEFAULT_SANITY_REQUEST_MAX_RETRIES
    sanity_request_retry_delay_ms: int = DEFAULT_SANITY_REQUEST_RETRY_DELAY_MS

    # Sanity (public web-app values, non-production fallback only)
    next_public_sanity_project_id: str | None = None
    next_public_sanity_dataset: str | None = None
    next_public_sanity_api_version: str | None = None

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("environment", mode="before")
    @classmethod
    def parse_environment(cls, v: object) -> RuntimeEnvironment:
        """Unknown environments run as development."""
        normalized = str(v or "").strip().lower()
        if normalized == "production":
            return RuntimeEnvironment.PRODUCTION
        if normalized == "test":
            return RuntimeEnvironment.TEST
        return RuntimeEnvironment.DEVELOPMENT

    @field_validator("port", mode="before")
    @classmethod
    def parse_port(cls, v: object) -> int:
        return _bounded_int(v, DEFAULT_API_PORT, 1, 65_535)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, v: object) -> list[str]:
        """Accept a comma-separated string or a list."""
        if v is None:
            return []
        items = v.split(",") if isinstance(v, str) else list(v)
        return [str(o).strip() for o in items if str(o).strip()]

    @field_validator("content_provider", mode="before")
    @classmethod
    def parse_content_provider(cls, v: object) -> ProviderName:
        """Only an explicit "static" opts out of the CMS provider."""
        if str(v or "").strip().lower() == ProviderName.STATIC.value:
            return ProviderName.STATIC
        return ProviderName.SANITY

    @field_validator("serverless", mode="before")
    @classmethod
    def parse_serverless(cls, v: object) -> bool:
        if isinstance(v, bool):
            return v
        return str(v or "").strip().lower() in _TRUTHY

    @field_validator("sanity_use_cdn", mode="before")
    @classmethod
    def parse_use_cdn(cls, v: object) -> bool:
        if isinstance(v, bool):
            return v
        normalized = str(v or "").strip().lower()
        if not normalized:
            return True
        return normalized in _TRUTHY

    @field_validator(
        "sanity_project_id", "sanity_dataset", "sanity_api_version",
        "sanity_api_read_token", "next_public_sanity_project_id",
        "next_public_sanity_dataset", "next_public_sanity_api_version",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: object) -> str | None:
        if v is None:
            return None
        stripped = str(v).strip()
        return stripped or None

    @field_validator("sanity_request_timeout_ms", mode="before")
    @classmethod
    def parse_timeout(cls, v: object) -> int:
        return _bounded_int(v, DEFAULT_SANITY_REQUEST_TIMEOUT_MS, 100, 60_000)

    @field_validator("sanity_request_max_retries", mode="before")
    @classmethod
    def parse_max_retries(cls, v: object) -> int:
        return _bounded_int(v, DEFAULT_SANITY_REQUEST_MAX_RETRIES, 0, 5)

    @field_validator("sanity_request_retry_delay_ms", mode="before")
    @classmethod
    def parse_retry_delay(cls, v: object) -> int:
        return _bounded_int(v, DEFAULT_SANITY_REQUEST_RETRY_DELAY_MS, 0, 10_000)

    @property
    def is_production(self) -> bool:
        return self.environment is RuntimeEnvironment.PRODUCTION

    @property
    def has_public_sanity_env(self) -> bool:
        return bool(
            self.next_public_sanity_project_id or self.next_public_sanity_dataset
        )

    def sanity_options(self) -> SanityOptions:
        """Resolve Sanity options, server values first.

        Outside production the NEXT_PUBLIC_* values fill gaps; in production
        only server-side values count.
        """
        project_id = self.sanity_project_id
        dataset = self.sanity_dataset
        api_version = self.sanity_api_version
        if not self.is_production:
            project_id = project_id or self.next_public_sanity_project_id
            dataset = dataset or self.next_public_sanity_dataset
            api_version = api_version or self.next_public_sanity_api_version
        return SanityOptions(
            project_id=project_id,
            dataset=dataset,
            api_version=api_version or DEFAULT_SANITY_API_VERSION,
            read_token=self.sanity_api_read_token,
            use_cdn=self.sanity_use_cdn,
            request_timeout_ms=self.sanity_request_timeout_ms,
            max_retries=self.sanity_request_max_retries,
            retry_delay_ms=self.sanity_request_retry_delay_ms,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
