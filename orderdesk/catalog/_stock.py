"""
Product stock — reads and atomic mutations inside the caller's transaction.

Every function takes the session of the owning transaction; none of them
commits. Decrements are guarded UPDATEs, so two transactions racing on the
same product cannot both succeed against a stale read.
"""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession

from kungfu import Result, Ok, Error

from orderdesk._types import ProductId, from_cents
from orderdesk.catalog._types import Product, ProductNotFound, InsufficientStock
from orderdesk.db import ProductTable


def _to_product(row: ProductTable) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        category_id=row.category_id,
        price=from_cents(row.price_cents),
        stock=row.stock,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Reads
# ═══════════════════════════════════════════════════════════════════════════════


def has_stock(product: Product, quantity: int) -> bool:
    return quantity <= product.stock


async def get(session: AsyncSession, product_id: ProductId) -> Product | None:
    stmt = (
        select(ProductTable)
        .where(ProductTable.id == product_id)
        .execution_options(populate_existing=True)
    )
    row = (await session.execute(stmt)).scalar_one_or_none()
    return _to_product(row) if row else None


async def lock(session: AsyncSession, product_id: ProductId) -> Product | None:
    """
    Load product with a row lock for the rest of the transaction.

    SELECT ... FOR UPDATE on dialects that support it. SQLite ignores the
    clause; there the lock is the database write lock, held only once the
    transaction has written something.
    """
    stmt = (
        select(ProductTable)
        .where(ProductTable.id == product_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    row = (await session.execute(stmt)).scalar_one_or_none()
    return _to_product(row) if row else None


# ═══════════════════════════════════════════════════════════════════════════════
# Mutations
# ═══════════════════════════════════════════════════════════════════════════════


async def decrease(
    session: AsyncSession,
    product: Product,
    quantity: int,
) -> Result[Product, InsufficientStock]:
    """Subtract `quantity`. Fails (never clamps) when stock would go negative."""
    stmt = (
        update(ProductTable)
        .where(ProductTable.id == product.id, ProductTable.stock >= quantity)
        .values(stock=ProductTable.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    cursor = cast(CursorResult[Any], await session.execute(stmt))

    if cursor.rowcount == 0:
        current = await get(session, product.id)
        return Error(
            InsufficientStock(
                product_id=product.id,
                product_name=product.name,
                requested=quantity,
                available=current.stock if current else 0,
            )
        )

    return Ok(
        Product(
            id=product.id,
            name=product.name,
            category_id=product.category_id,
            price=product.price,
            stock=product.stock - quantity,
        )
    )


async def increase(
    session: AsyncSession,
    product_id: ProductId,
    quantity: int,
) -> Result[None, ProductNotFound]:
    """Add `quantity` back. No upper bound: restoring always succeeds."""
    stmt = (
        update(ProductTable)
        .where(ProductTable.id == product_id)
        .values(stock=ProductTable.stock + quantity)
        .execution_options(synchronize_session=False)
    )
    cursor = cast(CursorResult[Any], await session.execute(stmt))

    if cursor.rowcount == 0:
        return Error(ProductNotFound(product_id))
    return Ok(None)


__all__ = ("has_stock", "get", "lock", "decrease", "increase")
