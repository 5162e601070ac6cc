"""Viewer configuration.

Environment variables use the ``JOKEBOX_VIEWER_`` prefix and may also be set
in a ``.env`` file.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_storage_path() -> Path:
    return Path.home() / ".jokebox" / "local_storage.json"


class ViewerSettings(BaseSettings):
    """Settings for the joke viewer and its persisted cache."""

    api_url: str = Field(default="http://localhost:4000")
    storage_path: Path = Field(default_factory=_default_storage_path)
    cache_ttl_seconds: int = Field(default=3600, ge=0)
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    max_retries: int = Field(default=3, ge=1)
    retry_delay_seconds: float = Field(default=2.0, ge=0.0)
    connectivity_interval_seconds: float = Field(default=15.0, gt=0.0)

    # OpenTelemetry for outbound requests
    otel_enabled: bool = Field(default=False)
    otel_service_name: str = Field(default="jokebox-viewer")
    otel_service_version: str = Field(default="0.1.0")
    otel_exporter_otlp_endpoint: str = Field(default="http://localhost:4317")
    otel_exporter_otlp_headers: str | None = Field(default=None)

    model_config = SettingsConfigDict(
        env_prefix="JOKEBOX_VIEWER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalise the base URL so paths can be appended directly."""
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("Viewer API URL must be http(s)")
        return value.rstrip("/")


@lru_cache
def get_viewer_settings() -> ViewerSettings:
    """Return cached viewer settings instance."""
    return ViewerSettings()
