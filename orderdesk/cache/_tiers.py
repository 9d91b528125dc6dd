"""
Built-in tiers: in-process LRU (primary) and SQL table (fallback).
"""

from __future__ import annotations

import logging
import pickle
import time
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, cast

from sqlalchemy import delete
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from orderdesk.db import CacheEntryTable

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Local Tier — In-Memory LRU with TTL
# ═══════════════════════════════════════════════════════════════════════════════


class LocalTier[T]:
    """
    In-memory LRU cache tier.

    Example:
        tier = LocalTier[Order](max_size=1000, ttl=timedelta(minutes=5))
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl: timedelta | None = None,
        tier_name: str = "local",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_size = max_size
        self._clock = clock
        self._ttl = ttl.total_seconds() if ttl else None
        self._name = tier_name
        # key -> (expires_at monotonic or None, value)
        self._cache: dict[str, tuple[float | None, T]] = {}
        self._order: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    def __len__(self) -> int:
        return len(self._cache)

    async def get(self, key: str) -> T | None:
        entry = self._cache.get(key)
        if entry is None:
            return None

        expires_at, value = entry
        if expires_at is not None and self._clock() >= expires_at:
            self._drop(key)
            return None

        # Move to end (most recent)
        self._order.remove(key)
        self._order.append(key)
        return value

    async def set(self, key: str, value: T) -> None:
        if key in self._cache:
            self._order.remove(key)
        elif len(self._cache) >= self._max_size:
            # Evict oldest
            oldest = self._order.pop(0)
            del self._cache[oldest]

        expires_at = self._clock() + self._ttl if self._ttl else None
        self._cache[key] = (expires_at, value)
        self._order.append(key)

    async def delete(self, key: str) -> bool:
        if key in self._cache:
            self._drop(key)
            return True
        return False

    def _drop(self, key: str) -> None:
        del self._cache[key]
        self._order.remove(key)


# ═══════════════════════════════════════════════════════════════════════════════
# SQL Tier — cache_entries table
# ═══════════════════════════════════════════════════════════════════════════════


class SqlTier[T]:
    """
    Database-backed tier: survives restarts, shared between workers.

    Values are pickled; each call runs in its own short session, never in the
    caller's order transaction.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ttl: timedelta | None = None,
        tier_name: str = "database",
    ) -> None:
        self._session_factory = session_factory
        self._ttl = ttl
        self._name = tier_name

    @property
    def name(self) -> str:
        return self._name

    async def get(self, key: str) -> T | None:
        async with self._session_factory() as session:
            row = await session.get(CacheEntryTable, key)
            if row is None:
                return None
            if row.expires_at is not None and datetime.now() >= row.expires_at:
                await self._evict(session, key, row)
                return None
            value: T = pickle.loads(row.value)
            return value

    async def _evict(self, session: AsyncSession, key: str, row: CacheEntryTable) -> None:
        # An expired row is a miss even when it cannot be removed right now
        try:
            await session.delete(row)
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.warning("could not evict expired %s from %s: %s", key, self._name, exc)

    async def set(self, key: str, value: T) -> None:
        expires_at = datetime.now() + self._ttl if self._ttl else None
        async with self._session_factory() as session:
            await session.merge(
                CacheEntryTable(key=key, value=pickle.dumps(value), expires_at=expires_at)
            )
            await session.commit()

    async def delete(self, key: str) -> bool:
        async with self._session_factory() as session:
            cursor = cast(
                CursorResult[Any],
                await session.execute(
                    delete(CacheEntryTable).where(CacheEntryTable.key == key)
                ),
            )
            await session.commit()
            return cursor.rowcount > 0


__all__ = ("LocalTier", "SqlTier")
