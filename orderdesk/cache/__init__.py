"""
Cache — two-tier read-through caching.

    from orderdesk import cache as C

    orders = (
        C.cache(lambda oid: f"orders:{oid}", fetch_order)
        .tier(C.LocalTier(max_size=1000))
        .tier(C.SqlTier(session_factory))
        .build()
    )
    result = await orders.get(order_id)
"""

from __future__ import annotations

from orderdesk.cache._types import (
    Tier,
    CacheResult,
    CacheUnavailable,
)
from orderdesk.cache._tiers import LocalTier, SqlTier
from orderdesk.cache._builder import cache, Cache, CacheExecutor

__all__ = (
    "Tier",
    "LocalTier",
    "SqlTier",
    "CacheResult",
    "CacheUnavailable",
    "cache",
    "Cache",
    "CacheExecutor",
)
