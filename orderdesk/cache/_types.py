"""
Cache types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from orderdesk._types import OrderDeskError

# ═══════════════════════════════════════════════════════════════════════════════
# Tier Protocol — Backends Implement This
# ═══════════════════════════════════════════════════════════════════════════════


class Tier[T](Protocol):
    """
    Cache tier protocol.

    Implement this for custom backends (Redis, Memcached, etc.)
    A tier signals "miss" by returning None and "failure" by raising.

    Example:
        class RedisTier[T]:
            def __init__(self, client: Redis, ttl: int | None = None):
                self.client = client
                self.ttl = ttl

            @property
            def name(self) -> str:
                return "redis"

            async def get(self, key: str) -> T | None:
                data = await self.client.get(key)
                return pickle.loads(data) if data else None

            async def set(self, key: str, value: T) -> None:
                await self.client.set(key, pickle.dumps(value), ex=self.ttl)

            async def delete(self, key: str) -> bool:
                return await self.client.delete(key) > 0
    """

    @property
    def name(self) -> str:
        """Tier name for logs."""
        ...

    async def get(self, key: str) -> T | None:
        """Get value. Returns None on miss, raises on failure."""
        ...

    async def set(self, key: str, value: T) -> None:
        """Set value."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete key. Returns True if existed."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Cache Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CacheResult[T]:
    """Read result with metadata."""

    value: T
    hit: bool
    tier: str | None


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CacheUnavailable(OrderDeskError):
    """Every configured tier failed. Distinct from a source-of-truth failure."""

    key: str
    tiers: tuple[str, ...]

    def __str__(self) -> str:
        return f"Cache unavailable for {self.key!r}: all tiers failed ({', '.join(self.tiers)})"


__all__ = (
    "Tier",
    "CacheResult",
    "CacheUnavailable",
)
