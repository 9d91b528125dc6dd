"""
Demo data — three customers, three products, three orders.

Orders go through the lifecycle, so stock is reserved exactly as for API
traffic; each product ends up with 10 units left.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kungfu import Ok, Error

from orderdesk._types import OrderId, to_cents
from orderdesk.db import CustomerTable, ProductTable
from orderdesk.orders import LineRequest, OrderLifecycle

logger = logging.getLogger(__name__)

CUSTOMERS = (
    (1, "Türker Jöntürk", date(2014, 6, 28)),
    (2, "Kaptan Devopuz", date(2015, 1, 15)),
    (3, "İsa Sonuyumaz", date(2016, 2, 11)),
)

# (id, name, category_id, price, stock before seeded orders)
PRODUCTS = (
    (100, "Black&Decker A7062 40 Parça Cırcırlı Tornavida Seti", 1, Decimal("120.75"), 21),
    (101, "Reko Mini Tamir Hassas Tornavida Seti 32'li", 1, Decimal("49.50"), 12),
    (102, "Viko Karre Anahtar - Beyaz", 2, Decimal("11.28"), 26),
)

ORDERS = (
    (1, (LineRequest(102, 10),)),
    (2, (LineRequest(101, 2), LineRequest(100, 1))),
    (3, (LineRequest(102, 6), LineRequest(100, 10))),
)


class SeedError(RuntimeError):
    pass


async def seed_catalog(session: AsyncSession) -> bool:
    """Insert customers and products into an empty database."""
    if await session.scalar(select(func.count()).select_from(CustomerTable)):
        return False

    session.add_all(
        CustomerTable(id=cid, name=name, since=since) for cid, name, since in CUSTOMERS
    )
    session.add_all(
        ProductTable(
            id=pid,
            name=name,
            category_id=category_id,
            price_cents=to_cents(price),
            stock=stock,
        )
        for pid, name, category_id, price, stock in PRODUCTS
    )
    await session.commit()
    return True


async def seed(session_factory: async_sessionmaker[AsyncSession]) -> list[OrderId]:
    """
    Seed catalog and demo orders. No-op on a database that has customers.

    Returns:
        ids of the created orders
    """
    async with session_factory() as session:
        if not await seed_catalog(session):
            logger.info("database already seeded")
            return []

    lifecycle = OrderLifecycle(session_factory)
    created: list[OrderId] = []
    for customer_id, lines in ORDERS:
        match await lifecycle.create(customer_id, lines):
            case Ok(order):
                created.append(order.id)
            case Error(e):
                raise SeedError(f"seed order for customer {customer_id} failed: {e}")

    logger.info("seeded %d customers, %d products, %d orders", len(CUSTOMERS), len(PRODUCTS), len(created))
    return created


__all__ = ("seed", "seed_catalog", "SeedError", "CUSTOMERS", "PRODUCTS", "ORDERS")
