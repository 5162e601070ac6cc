from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from jokebox.core.config import Settings, get_settings


class Base(DeclarativeBase):
    """Declarative base class for SQLAlchemy models."""


def _connect_args(settings: Settings) -> dict[str, Any]:
    """Driver connect arguments; DB_SSL requests TLS without certificate checks."""
    if settings.db_ssl:
        return {"ssl": "require"}
    return {}


def _build_engine() -> AsyncEngine:
    """Create an async SQLAlchemy engine using application settings."""
    settings = get_settings()
    return create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_timeout=settings.database_pool_timeout_seconds,
        pool_pre_ping=True,
        connect_args=_connect_args(settings),
    )


engine: AsyncEngine = _build_engine()
"""Shared async engine instance; its pool bounds concurrent store connections."""
