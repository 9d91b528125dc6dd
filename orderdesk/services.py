"""
Services container — everything a request needs, wired once per process.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from orderdesk.cache import LocalTier, SqlTier, Tier
from orderdesk.config import Settings
from orderdesk.db import create_database
from orderdesk.discount import DiscountService
from orderdesk.orders import OrderLifecycle, OrderReadCache

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Services:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    read_cache: OrderReadCache
    lifecycle: OrderLifecycle
    discounts: DiscountService

    async def close(self) -> None:
        await self.engine.dispose()


def default_tiers(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> tuple[Tier[object], ...]:
    """Primary in-process LRU, fallback `cache_entries` table."""
    return (
        LocalTier(max_size=settings.cache_max_size, ttl=settings.cache_ttl),
        SqlTier(session_factory, ttl=settings.cache_ttl),
    )


async def build_services(
    settings: Settings | None = None,
    *,
    create_schema: bool = True,
    tiers: tuple[Tier[object], ...] | None = None,
) -> Services:
    """
    Open the database and assemble services.

    `tiers=()` disables read caching; None uses the default two tiers.
    """
    settings = settings or Settings()
    session_factory, engine = await create_database(
        settings.database_url, create_schema=create_schema
    )

    if tiers is None:
        tiers = default_tiers(settings, session_factory)
    read_cache = OrderReadCache(session_factory, tiers)

    logger.info(
        "services ready: db=%s tiers=%s",
        engine.url.render_as_string(hide_password=True),
        [t.name for t in tiers],
    )
    return Services(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        read_cache=read_cache,
        lifecycle=OrderLifecycle(session_factory, read_cache),
        discounts=DiscountService(session_factory, settings.discount),
    )


__all__ = ("Services", "build_services", "default_tiers")
