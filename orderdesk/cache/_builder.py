"""
Cache builder — fluent API.

Read-through over an ordered chain of tiers:

    READ:       primary → hit?  return
                        → miss? fetch(), write back to primary, return
                        → error? same logic on fallback
                all tiers errored → CacheUnavailable (source is NOT consulted)
    INVALIDATE: delete on every tier, failures logged and suppressed
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from collections.abc import Callable

from kungfu import LazyCoroResult, Result, Ok, Error

from orderdesk.cache._types import (
    Tier,
    CacheResult,
    CacheUnavailable,
)

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Key Function Type
# ═══════════════════════════════════════════════════════════════════════════════

type KeyFn[K] = Callable[[K], str]


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Builder
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, frozen=True)
class Cache[K, T, E]:
    """
    Fluent cache builder.

    Type parameters:
        K: Key input type
        T: Value type
        E: Error type from fetch

    Example:
        order_cache = (
            C.cache(lambda oid: f"orders:{oid}", fetch_order)
            .tier(primary)
            .tier(fallback)
            .build()
        )
    """

    _key_fn: KeyFn[K]
    _fetch: Callable[[K], LazyCoroResult[T, E]]
    _tiers: tuple[Tier[T], ...]

    def tier(self, t: Tier[T]) -> Cache[K, T, E]:
        """Append a tier; earlier tiers are tried first."""
        return Cache(
            _key_fn=self._key_fn,
            _fetch=self._fetch,
            _tiers=(*self._tiers, t),
        )

    def tiers(self, *ts: Tier[T]) -> Cache[K, T, E]:
        return Cache(
            _key_fn=self._key_fn,
            _fetch=self._fetch,
            _tiers=(*self._tiers, *ts),
        )

    def build(self) -> CacheExecutor[K, T, E]:
        """Build executable cache."""
        return CacheExecutor(
            key_fn=self._key_fn,
            tiers=self._tiers,
            fetch=self._fetch,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Executor
# ═══════════════════════════════════════════════════════════════════════════════


async def _write_back[T](t: Tier[T], cache_key: str, value: T) -> None:
    try:
        await t.set(cache_key, value)
    except Exception as exc:
        # Stale or missing entry is acceptable; the read already succeeded
        logger.warning("cache write to %s failed for %s: %s", t.name, cache_key, exc)


@dataclass(slots=True, frozen=True)
class CacheExecutor[K, T, E]:
    """Compiled cache executor."""

    key_fn: KeyFn[K]
    tiers: tuple[Tier[T], ...]
    fetch: Callable[[K], LazyCoroResult[T, E]]

    def get(self, key: K) -> LazyCoroResult[CacheResult[T], CacheUnavailable | E]:
        """
        Read through the first healthy tier.

        With no tiers configured the cache is disabled and reads go straight
        to fetch.
        """
        cache_key = self.key_fn(key)
        tiers = self.tiers
        fetch_fn = self.fetch

        async def read_through(t: Tier[T] | None) -> Result[CacheResult[T], E]:
            result = await fetch_fn(key)
            match result:
                case Ok(value):
                    if t is not None:
                        await _write_back(t, cache_key, value)
                    return Ok(
                        CacheResult(
                            value=value,
                            hit=False,
                            tier=t.name if t is not None else None,
                        )
                    )
                case Error(e):
                    return Error(e)

        async def execute() -> Result[CacheResult[T], CacheUnavailable | E]:
            if not tiers:
                return await read_through(None)

            failed: list[str] = []
            for t in tiers:
                try:
                    value = await t.get(cache_key)
                except Exception as exc:
                    logger.warning(
                        "cache tier %s failed reading %s, trying next: %s",
                        t.name,
                        cache_key,
                        exc,
                    )
                    failed.append(t.name)
                    continue

                if value is not None:
                    return Ok(CacheResult(value=value, hit=True, tier=t.name))
                return await read_through(t)

            logger.error("all cache tiers failed for %s: %s", cache_key, failed)
            return Error(CacheUnavailable(key=cache_key, tiers=tuple(failed)))

        return LazyCoroResult(execute)

    async def invalidate(self, key: K) -> bool:
        """
        Invalidate key in all tiers. Never raises.

        Returns:
            True if any tier held the key
        """
        cache_key = self.key_fn(key)
        deleted = False
        for t in self.tiers:
            try:
                if await t.delete(cache_key):
                    deleted = True
            except Exception as exc:
                logger.warning("cache invalidation on %s failed for %s: %s", t.name, cache_key, exc)
        return deleted


# ═══════════════════════════════════════════════════════════════════════════════
# cache() — Entry Point (Type-Safe)
# ═══════════════════════════════════════════════════════════════════════════════


def cache[K, T, E](
    key: KeyFn[K],
    fetch: Callable[[K], LazyCoroResult[T, E]],
) -> Cache[K, T, E]:
    """
    Create cache builder with key function and fetch.

    Example:
        from orderdesk import cache as C

        order_cache = (
            C.cache(lambda oid: f"orders:{oid}", fetch_order)
            .tier(C.LocalTier(max_size=100))
            .build()
        )

        result = await order_cache.get(order_id)
    """
    return Cache(
        _key_fn=key,
        _fetch=fetch,
        _tiers=(),
    )


__all__ = ("Cache", "CacheExecutor", "cache")
