from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

DeviceClass = Literal["mobile", "desktop"]


class JokePage(BaseModel):
    """One page of jokes shaped for the requesting device class."""

    model_config = ConfigDict(populate_by_name=True)

    data: list[dict[str, Any]] = Field(
        default_factory=list, description="Joke records on this page."
    )
    page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=1, alias="totalPages")
    device: DeviceClass


class HealthStatus(BaseModel):
    status: Literal["healthy", "unhealthy"]
    database: Literal["connected", "disconnected"]
    cache: Literal["available", "unavailable"]


class ErrorBody(BaseModel):
    error: str
    message: str
    details: str | None = Field(
        None, description="Internal error detail, only populated in development."
    )


class CacheCleared(BaseModel):
    status: Literal["cleared"] = "cleared"
