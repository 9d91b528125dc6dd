"""
Discount service — load the live order, run the engine.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from orderdesk._types import OrderId
from orderdesk.orders import OrderNotFound, load_order
from orderdesk.discount._engine import calculate_discounts
from orderdesk.discount._types import DiscountPolicy, DiscountResult

logger = logging.getLogger(__name__)


class DiscountService:
    """Reads the order straight from the store; never through the cache."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        policy: DiscountPolicy | None = None,
    ) -> None:
        self._session_factory = session_factory
        self.policy = policy or DiscountPolicy()

    async def calculate(self, order_id: OrderId) -> Result[DiscountResult, OrderNotFound]:
        async with self._session_factory() as session:
            order = await load_order(session, order_id)

        if order is None:
            return Error(OrderNotFound(order_id))

        result = calculate_discounts(order, self.policy)
        logger.debug(
            "order %s: %d discount(s), %s off %s",
            order_id,
            len(result.discounts),
            result.total_discount,
            result.subtotal,
        )
        return Ok(result)


__all__ = ("DiscountService",)
