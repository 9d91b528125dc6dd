"""
Order lifecycle — create / update / delete, one transaction each.

    STARTED → ITEMS_PREPARED → PERSISTED → COMMITTED
        └────────── any failure ──────────→ ROLLED_BACK

Business-rule errors come back unwrapped; anything unexpected is wrapped in
the operation's OrderMutationFailed subclass with the original exception as
`cause`. Either way nothing of the transaction survives: stock decrements,
stock restorations and item rows roll back together.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Result, Ok, Error

from orderdesk._types import CustomerId, OrderDeskError, OrderId, to_cents
from orderdesk import catalog
from orderdesk.db import CustomerTable, OrderItemTable, OrderTable
from orderdesk.orders import _repo
from orderdesk.orders._builder import prepare_items
from orderdesk.orders._reads import OrderReadCache
from orderdesk.orders._types import (
    CreateError,
    CustomerNotFound,
    DeleteError,
    LifecycleState,
    LineRequest,
    Order,
    OrderCreationFailed,
    OrderDeletionFailed,
    OrderMutationFailed,
    OrderNotFound,
    OrderUpdateFailed,
    PricedLine,
    UpdateError,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Transaction Tracking
# ═══════════════════════════════════════════════════════════════════════════════


class OrderTransaction:
    """State of one lifecycle transaction, logged on every transition."""

    def __init__(self, operation: str, order_id: OrderId | None = None) -> None:
        self.operation = operation
        self.order_id = order_id
        self.state = LifecycleState.STARTED
        logger.debug("[%s order=%s] %s", operation, order_id, self.state.name)

    def enter(self, state: LifecycleState) -> None:
        self.state = state
        logger.debug("[%s order=%s] %s", self.operation, self.order_id, state.name)


type TxBody[T] = Callable[[AsyncSession, OrderTransaction], Awaitable[Result[T, OrderDeskError]]]


# ═══════════════════════════════════════════════════════════════════════════════
# Lifecycle
# ═══════════════════════════════════════════════════════════════════════════════


class OrderLifecycle:
    """
    Order writes with inventory consistency.

    Example:
        lifecycle = OrderLifecycle(session_factory, read_cache)
        result = await lifecycle.create(1, [LineRequest(product_id=100, quantity=2)])
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        read_cache: OrderReadCache | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._read_cache = read_cache

    # ═══════════════════════════════════════════════════════════════════════
    # Operations
    # ═══════════════════════════════════════════════════════════════════════

    async def create(
        self,
        customer_id: CustomerId,
        items: Sequence[LineRequest],
    ) -> Result[Order, CreateError]:
        async def body(session: AsyncSession, tx: OrderTransaction) -> Result[Order, OrderDeskError]:
            if await session.get(CustomerTable, customer_id) is None:
                return Error(CustomerNotFound(customer_id))

            row = OrderTable(customer_id=customer_id, total_cents=0)
            session.add(row)
            await session.flush()
            tx.order_id = row.id

            return await self._fill(session, tx, row, items)

        return await self._run(OrderTransaction("create"), body, OrderCreationFailed)  # type: ignore[return-value]

    async def update(
        self,
        order_id: OrderId,
        items: Sequence[LineRequest],
    ) -> Result[Order, UpdateError]:
        async def body(session: AsyncSession, tx: OrderTransaction) -> Result[Order, OrderDeskError]:
            if not await _repo.claim(session, order_id, updated_at=datetime.now()):
                return Error(OrderNotFound(order_id))
            row = await _repo.find_row(session, order_id)
            if row is None:
                raise RuntimeError(f"order {order_id} vanished inside its own transaction")

            # Full restoration before re-validating, so new lines may reuse it
            match await self._release_items(session, order_id):
                case Error(e):
                    return Error(e)
                case Ok(_):
                    pass

            return await self._fill(session, tx, row, items)

        return await self._run(OrderTransaction("update", order_id), body, OrderUpdateFailed)  # type: ignore[return-value]

    async def delete(self, order_id: OrderId) -> Result[None, DeleteError]:
        async def body(session: AsyncSession, tx: OrderTransaction) -> Result[None, OrderDeskError]:
            # Items stay attached to the soft-deleted order as history
            if not await _repo.claim(session, order_id, deleted_at=datetime.now()):
                return Error(OrderNotFound(order_id))

            for item in await _repo.live_items(session, order_id):
                match await catalog.increase(session, item.product_id, item.quantity):
                    case Error(e):
                        return Error(e)
                    case Ok(_):
                        pass

            tx.enter(LifecycleState.PERSISTED)
            return Ok(None)

        return await self._run(OrderTransaction("delete", order_id), body, OrderDeletionFailed)  # type: ignore[return-value]

    # ═══════════════════════════════════════════════════════════════════════
    # Steps
    # ═══════════════════════════════════════════════════════════════════════

    async def _release_items(
        self,
        session: AsyncSession,
        order_id: OrderId,
    ) -> Result[int, OrderDeskError]:
        """Restore stock for every live item, then soft-delete the items."""
        now = datetime.now()
        released = 0
        for item in await _repo.live_items(session, order_id):
            match await catalog.increase(session, item.product_id, item.quantity):
                case Error(e):
                    return Error(e)
                case Ok(_):
                    pass
            item.deleted_at = now
            released += 1
        await session.flush()
        return Ok(released)

    async def _fill(
        self,
        session: AsyncSession,
        tx: OrderTransaction,
        row: OrderTable,
        items: Sequence[LineRequest],
    ) -> Result[Order, OrderDeskError]:
        """Prepare lines, persist them, recompute the total, reload."""
        match await prepare_items(session, items):
            case Error(e):
                return Error(e)
            case Ok(prepared):
                lines: list[PricedLine] = prepared
        tx.enter(LifecycleState.ITEMS_PREPARED)

        session.add_all(
            OrderItemTable(
                order_id=row.id,
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price_cents=to_cents(line.unit_price),
                total_cents=to_cents(line.total),
            )
            for line in lines
        )
        await session.flush()

        row.total_cents = await _repo.items_total_cents(session, row.id)
        await session.flush()
        tx.enter(LifecycleState.PERSISTED)

        order = await _repo.load_order(session, row.id)
        if order is None:
            raise RuntimeError(f"order {row.id} vanished inside its own transaction")
        return Ok(order)

    # ═══════════════════════════════════════════════════════════════════════
    # Transaction Runner
    # ═══════════════════════════════════════════════════════════════════════

    async def _run[T](
        self,
        tx: OrderTransaction,
        body: TxBody[T],
        wrap: type[OrderMutationFailed],
    ) -> Result[T, OrderDeskError]:
        async with self._session_factory() as session:
            try:
                result = await body(session, tx)
                if isinstance(result, Ok):
                    await session.commit()
            except Exception as exc:
                await session.rollback()
                tx.enter(LifecycleState.ROLLED_BACK)
                logger.exception("[%s order=%s] failed, rolled back", tx.operation, tx.order_id)
                return Error(wrap(order_id=tx.order_id, cause=exc))

            match result:
                case Ok(_):
                    tx.enter(LifecycleState.COMMITTED)
                case Error(e):
                    await session.rollback()
                    tx.enter(LifecycleState.ROLLED_BACK)
                    logger.warning("[%s order=%s] rejected: %s", tx.operation, tx.order_id, e)
                    return Error(e)

        logger.info("[%s order=%s] committed", tx.operation, tx.order_id)
        await self._forget(tx.order_id)
        return result

    async def _forget(self, order_id: OrderId | None) -> None:
        if self._read_cache is not None:
            await self._read_cache.forget(order_id)


__all__ = ("OrderLifecycle", "OrderTransaction")
