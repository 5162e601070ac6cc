from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from jokebox.services.errors import StoreConnectionError, StoreQueryError

logger = logging.getLogger(__name__)

JokeRecord = dict[str, Any]

SELECT_ALL_JOKES = text("SELECT * FROM jokes")
PING = text("SELECT 1")


class JokeRepository:
    """Read-only access to the ``jokes`` relation.

    Every call checks a connection out of the engine pool and returns it
    before the call completes, whether the query succeeded or not.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[AsyncConnection]:
        try:
            connection = await self._engine.connect()
        except (SQLAlchemyError, OSError) as exc:
            raise StoreConnectionError("Could not acquire a store connection.") from exc
        try:
            yield connection
        finally:
            await connection.close()

    async def fetch_all(self) -> list[JokeRecord]:
        """Return every row of the jokes relation as plain dicts.

        Row order is whatever the store returns.
        """
        async with self._connection() as connection:
            try:
                result = await connection.execute(SELECT_ALL_JOKES)
                rows = result.mappings().all()
            except (SQLAlchemyError, OSError) as exc:
                raise StoreQueryError("Query against the jokes relation failed.") from exc
        return [dict(row) for row in rows]

    async def ping(self) -> None:
        """Round-trip a trivial query to prove the store is reachable."""
        async with self._connection() as connection:
            try:
                await connection.execute(PING)
            except (SQLAlchemyError, OSError) as exc:
                raise StoreQueryError("Store ping failed.") from exc


__all__ = ["JokeRecord", "JokeRepository"]
