"""
Settings — defaults plus ORDERDESK_* environment overrides.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal

from orderdesk.discount import DiscountPolicy

ENV_PREFIX = "ORDERDESK_"


@dataclass(frozen=True, slots=True)
class Settings:
    database_url: str = "sqlite+aiosqlite:///./orderdesk.db"
    cache_ttl: timedelta = timedelta(minutes=5)
    cache_max_size: int = 1000
    log_level: str = "INFO"
    discount: DiscountPolicy = field(default_factory=DiscountPolicy)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """
        Read overrides from the environment.

        Unset variables keep their defaults; malformed values raise ValueError
        (or decimal.InvalidOperation) at startup.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            return env.get(ENV_PREFIX + name) or None

        defaults = cls()
        policy = defaults.discount

        min_items, category_rate = get("CATEGORY_MIN_ITEMS"), get("CATEGORY_RATE")
        policy = policy.with_category(
            min_items=int(min_items) if min_items else None,
            rate=Decimal(category_rate) if category_rate else None,
        )
        min_amount, total_rate = get("TOTAL_MIN_AMOUNT"), get("TOTAL_RATE")
        policy = policy.with_total_amount(
            min_amount=Decimal(min_amount) if min_amount else None,
            rate=Decimal(total_rate) if total_rate else None,
        )

        ttl = get("CACHE_TTL")
        max_size = get("CACHE_MAX_SIZE")
        return cls(
            database_url=get("DATABASE_URL") or defaults.database_url,
            cache_ttl=timedelta(seconds=float(ttl)) if ttl else defaults.cache_ttl,
            cache_max_size=int(max_size) if max_size else defaults.cache_max_size,
            log_level=(get("LOG_LEVEL") or defaults.log_level).upper(),
            discount=policy,
        )


__all__ = ("Settings", "ENV_PREFIX")
