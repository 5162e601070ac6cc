"""Application configuration.

Environment variables are loaded from .env file and can be overridden.
All settings have sensible defaults for local development.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any
from urllib.parse import quote_plus

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_DEFAULT_DB_USER = "root"
_DEFAULT_DB_PASSWORD = "root"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # Infrastructure
    # ==========================================================================

    # Environment mode - set to 'production' in production deployments.
    # NODE_ENV is accepted for deployments carried over from the Node backend.
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
        description="Deployment environment: 'development', 'staging', or 'production'.",
    )
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=4000, alias="PORT", ge=1, le=65535)

    # ==========================================================================
    # Store
    # ==========================================================================

    db_driver: str = Field(default="postgresql+asyncpg", alias="DB_DRIVER")
    db_host: str = Field(default="localhost", alias="DB_HOST")
    db_user: str = Field(default=_DEFAULT_DB_USER, alias="DB_USER")
    db_password: str = Field(default=_DEFAULT_DB_PASSWORD, alias="DB_PASSWORD")
    db_name: str = Field(default="joke", alias="DB_NAME")
    db_port: int = Field(default=5432, alias="DB_PORT", ge=1, le=65535)
    db_ssl: bool = Field(default=False, alias="DB_SSL")

    database_url_override: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description="Full database URL. Takes precedence over the DB_* parts.",
    )
    database_pool_size: int = Field(default=10, alias="DATABASE_POOL_SIZE", ge=1)
    database_max_overflow: int = Field(default=5, alias="DATABASE_MAX_OVERFLOW", ge=0)
    database_pool_timeout_seconds: float = Field(
        default=30.0, alias="DATABASE_POOL_TIMEOUT_SECONDS", gt=0.0
    )
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    # ==========================================================================
    # Cache and retry behaviour
    # ==========================================================================

    jokes_cache_ttl_seconds: int = Field(
        default=300, alias="JOKES_CACHE_TTL_SECONDS", ge=0
    )
    store_retry_attempts: int = Field(default=3, alias="STORE_RETRY_ATTEMPTS", ge=1)
    store_retry_delay_seconds: float = Field(
        default=1.0, alias="STORE_RETRY_DELAY_SECONDS", ge=0.0
    )
    health_check_interval_seconds: int = Field(
        default=30, alias="HEALTH_CHECK_INTERVAL_SECONDS", gt=0
    )

    # ==========================================================================
    # HTTP response shaping
    # ==========================================================================

    http_cache_max_age_seconds: int = Field(
        default=300, alias="HTTP_CACHE_MAX_AGE_SECONDS", ge=0
    )
    http_stale_if_error_seconds: int = Field(
        default=0, alias="HTTP_STALE_IF_ERROR_SECONDS", ge=0
    )
    mobile_page_size: int = Field(default=10, alias="MOBILE_PAGE_SIZE", ge=1)
    desktop_page_size: int = Field(default=20, alias="DESKTOP_PAGE_SIZE", ge=1)
    mobile_content_max_length: int = Field(
        default=150, alias="MOBILE_CONTENT_MAX_LENGTH", ge=1
    )

    # ==========================================================================
    # CORS
    # ==========================================================================

    cors_allow_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://localhost:3000",
            "http://127.0.0.1:5173",
            "http://127.0.0.1:3000",
        ],
        alias="CORS_ALLOW_ORIGINS",
    )
    cors_allow_origin_regex: str | None = Field(
        default=None, alias="CORS_ALLOW_ORIGIN_REGEX"
    )

    # ==========================================================================
    # OpenTelemetry (optional)
    # ==========================================================================

    otel_enabled: bool = Field(default=False, alias="OTEL_ENABLED")
    otel_service_name: str = Field(default="jokebox-backend", alias="OTEL_SERVICE_NAME")
    otel_service_version: str = Field(default="0.1.0", alias="OTEL_SERVICE_VERSION")
    otel_exporter_otlp_endpoint: str = Field(
        default="http://jaeger:4317", alias="OTEL_EXPORTER_OTLP_ENDPOINT"
    )
    otel_exporter_otlp_headers: str | None = Field(
        default=None, alias="OTEL_EXPORTER_OTLP_HEADERS"
    )

    # ==========================================================================
    # Pydantic Settings Config
    # ==========================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ==========================================================================
    # Derived values
    # ==========================================================================

    @property
    def database_url(self) -> str:
        """Return the store URL, built from the DB_* parts unless overridden."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"{self.db_driver}://{quote_plus(self.db_user)}:"
            f"{quote_plus(self.db_password)}@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def is_development(self) -> bool:
        """Whether internal error detail may be echoed to clients."""
        return self.environment.lower() == "development"

    # ==========================================================================
    # Validators
    # ==========================================================================

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: Any) -> list[str]:
        """Parse comma-separated or JSON-array CORS origins, rejecting wildcard '*'."""
        if isinstance(value, str):
            if not value:
                return []
            if value.lstrip().startswith("["):
                parsed = [str(item).strip() for item in json.loads(value)]
            else:
                parsed = [item.strip() for item in value.split(",") if item.strip()]
        else:
            parsed = list(value) if value is not None else []

        if "*" in parsed:
            raise ValueError(
                "Wildcard CORS origin '*' is not allowed. "
                "Specify explicit origins like 'http://localhost:3000'."
            )
        return parsed

    @model_validator(mode="after")
    def validate_production_security(self) -> "Settings":
        """Validate security-sensitive settings in production environment."""
        if self.environment.lower() == "production" and not self.database_url_override:
            if (
                self.db_user == _DEFAULT_DB_USER
                and self.db_password == _DEFAULT_DB_PASSWORD
            ):
                raise ValueError(
                    "Default database credentials detected in production. "
                    "Set DB_USER and DB_PASSWORD (or DATABASE_URL) with secure credentials."
                )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
