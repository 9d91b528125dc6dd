"""
Order reads — repository behind the two-tier cache.

Writes never read through here: the lifecycle reloads aggregates inside its
own transaction and only calls `forget()` after commit.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import LazyCoroResult, Result, Ok, Error
from combinators import lift as L

from orderdesk._types import OrderId, StoreUnavailable
from orderdesk import cache as C
from orderdesk.cache import CacheUnavailable, Tier
from orderdesk.orders._types import Order, OrderNotFound
from orderdesk.orders import _repo

CACHE_PREFIX = "orders"
ALL_KEY = f"{CACHE_PREFIX}:all"


def order_key(order_id: OrderId) -> str:
    return f"{CACHE_PREFIX}:{order_id}"


class OrderReadCache:
    """
    Cached `get_order` / `get_all_orders`.

    Tiers are tried in the given order (primary first). An empty tier
    sequence disables caching.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        tiers: Sequence[Tier[object]] = (),
    ) -> None:
        self._session_factory = session_factory
        self._orders = C.cache(order_key, self._fetch_order).tiers(*tiers).build()
        self._all = C.cache(lambda _: ALL_KEY, self._fetch_all).tiers(*tiers).build()

    # ═══════════════════════════════════════════════════════════════════════
    # Source of truth
    # ═══════════════════════════════════════════════════════════════════════

    def _fetch_order(self, order_id: OrderId) -> LazyCoroResult[Order, OrderNotFound | StoreUnavailable]:
        async def _fetch() -> Order:
            async with self._session_factory() as session:
                order = await _repo.load_order(session, order_id)
            if order is None:
                raise OrderNotFound(order_id)
            return order

        return L.catching_async(
            _fetch,
            on_error=lambda e: e
            if isinstance(e, OrderNotFound)
            else StoreUnavailable(f"Failed to load order {order_id}: {e}"),
        )

    def _fetch_all(self, _: None) -> LazyCoroResult[list[Order], StoreUnavailable]:
        async def _fetch() -> list[Order]:
            async with self._session_factory() as session:
                return await _repo.load_orders(session)

        return L.catching_async(
            _fetch,
            on_error=lambda e: StoreUnavailable(f"Failed to load orders: {e}"),
        )

    # ═══════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════

    async def get_order(
        self, order_id: OrderId
    ) -> Result[Order, OrderNotFound | StoreUnavailable | CacheUnavailable]:
        match await self._orders.get(order_id):
            case Ok(cached):
                return Ok(cached.value)
            case Error(e):
                return Error(e)

    async def get_all_orders(
        self,
    ) -> Result[list[Order], StoreUnavailable | CacheUnavailable]:
        match await self._all.get(None):
            case Ok(cached):
                return Ok(cached.value)
            case Error(e):
                return Error(e)

    # ═══════════════════════════════════════════════════════════════════════
    # Invalidation
    # ═══════════════════════════════════════════════════════════════════════

    async def forget(self, order_id: OrderId | None) -> None:
        """Drop the per-order entry and the collection entry on every tier."""
        if order_id is not None:
            await self._orders.invalidate(order_id)
        await self._all.invalidate(None)


__all__ = ("OrderReadCache", "order_key", "ALL_KEY")
