"""
Order repository — explicit eager fetch of full aggregates.

Each loader issues a fixed number of queries (orders, customers, items joined
with products) and returns frozen `Order` values with every relation filled.
Soft-deleted orders and items are skipped.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from datetime import datetime
from typing import Any, cast

from sqlalchemy import func, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk._types import OrderId, from_cents
from orderdesk.catalog import Product
from orderdesk.db import CustomerTable, OrderItemTable, OrderTable, ProductTable
from orderdesk.orders._types import Customer, Order, OrderItem

# ═══════════════════════════════════════════════════════════════════════════════
# Row → Domain
# ═══════════════════════════════════════════════════════════════════════════════


def _customer(row: CustomerTable) -> Customer:
    return Customer(id=row.id, name=row.name, since=row.since)


def _item(row: OrderItemTable, product: ProductTable) -> OrderItem:
    return OrderItem(
        id=row.id,
        order_id=row.order_id,
        product=Product(
            id=product.id,
            name=product.name,
            category_id=product.category_id,
            price=from_cents(product.price_cents),
            stock=product.stock,
        ),
        quantity=row.quantity,
        unit_price=from_cents(row.unit_price_cents),
        total=from_cents(row.total_cents),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Guarded Write
# ═══════════════════════════════════════════════════════════════════════════════


async def claim(
    session: AsyncSession,
    order_id: OrderId,
    **values: datetime,
) -> bool:
    """
    Guarded write on a live order. False when the order is absent or deleted.

    Must be the first statement of an order mutation: the UPDATE takes the
    row lock (SQLite: the database write lock) before anything is read, so a
    concurrent mutation of the same order waits and then sees its result.
    """
    stmt = (
        update(OrderTable)
        .where(OrderTable.id == order_id, OrderTable.deleted_at.is_(None))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    cursor = cast(CursorResult[Any], await session.execute(stmt))
    return cursor.rowcount > 0


# ═══════════════════════════════════════════════════════════════════════════════
# Loaders
# ═══════════════════════════════════════════════════════════════════════════════


async def find_row(session: AsyncSession, order_id: OrderId) -> OrderTable | None:
    """Live order row, tracked by the session."""
    stmt = select(OrderTable).where(
        OrderTable.id == order_id,
        OrderTable.deleted_at.is_(None),
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def live_items(session: AsyncSession, order_id: OrderId) -> list[OrderItemTable]:
    stmt = (
        select(OrderItemTable)
        .where(
            OrderItemTable.order_id == order_id,
            OrderItemTable.deleted_at.is_(None),
        )
        .order_by(OrderItemTable.id)
    )
    return list((await session.execute(stmt)).scalars())


async def items_total_cents(session: AsyncSession, order_id: OrderId) -> int:
    stmt = select(func.coalesce(func.sum(OrderItemTable.total_cents), 0)).where(
        OrderItemTable.order_id == order_id,
        OrderItemTable.deleted_at.is_(None),
    )
    return int((await session.execute(stmt)).scalar_one())


async def _assemble(
    session: AsyncSession,
    rows: Sequence[OrderTable],
) -> list[Order]:
    if not rows:
        return []

    order_ids = [row.id for row in rows]
    customer_ids = {row.customer_id for row in rows}

    customers = {
        c.id: _customer(c)
        for c in (
            await session.execute(
                select(CustomerTable).where(CustomerTable.id.in_(customer_ids))
            )
        ).scalars()
    }

    items_stmt = (
        select(OrderItemTable, ProductTable)
        .join(ProductTable, ProductTable.id == OrderItemTable.product_id)
        .where(
            OrderItemTable.order_id.in_(order_ids),
            OrderItemTable.deleted_at.is_(None),
        )
        .order_by(OrderItemTable.id)
        .execution_options(populate_existing=True)
    )
    items: dict[int, list[OrderItem]] = defaultdict(list)
    for item_row, product_row in (await session.execute(items_stmt)).tuples():
        items[item_row.order_id].append(_item(item_row, product_row))

    return [
        Order(
            id=row.id,
            customer=customers[row.customer_id],
            total=from_cents(row.total_cents),
            items=tuple(items[row.id]),
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
        for row in rows
    ]


async def load_order(session: AsyncSession, order_id: OrderId) -> Order | None:
    """Order with customer and items(+product), or None if absent/deleted."""
    stmt = (
        select(OrderTable)
        .where(OrderTable.id == order_id, OrderTable.deleted_at.is_(None))
        .execution_options(populate_existing=True)
    )
    row = (await session.execute(stmt)).scalar_one_or_none()
    if row is None:
        return None
    [order] = await _assemble(session, [row])
    return order


async def load_orders(session: AsyncSession) -> list[Order]:
    """Every live order, oldest first, fully loaded."""
    stmt = (
        select(OrderTable)
        .where(OrderTable.deleted_at.is_(None))
        .order_by(OrderTable.id)
        .execution_options(populate_existing=True)
    )
    rows = list((await session.execute(stmt)).scalars())
    return await _assemble(session, rows)


__all__ = (
    "claim",
    "find_row",
    "live_items",
    "items_total_cents",
    "load_order",
    "load_orders",
)
