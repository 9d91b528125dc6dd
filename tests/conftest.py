"""Pytest fixtures: file-backed SQLite per test, optional demo seed."""

from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from orderdesk.config import Settings
from orderdesk.db import CustomerTable, ProductTable
from orderdesk.seed import seed
from orderdesk.services import Services, build_services


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'orderdesk.db'}")


@pytest.fixture
async def services(settings: Settings) -> AsyncIterator[Services]:
    services = await build_services(settings)
    yield services
    await services.close()


@pytest.fixture
def session_factory(services: Services) -> async_sessionmaker[AsyncSession]:
    return services.session_factory


@pytest.fixture
async def seeded(services: Services) -> Services:
    """Demo data: orders 1-3, every product left with 10 units."""
    await seed(services.session_factory)
    return services


@pytest.fixture
def stock_of(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[int], Awaitable[int]]:
    async def read(product_id: int) -> int:
        async with session_factory() as session:
            row = await session.get(ProductTable, product_id)
            assert row is not None
            return row.stock

    return read


@pytest.fixture
def add_product(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[int]]:
    async def add(
        product_id: int,
        *,
        stock: int,
        price: str = "10.00",
        category_id: int = 1,
        name: str | None = None,
    ) -> int:
        async with session_factory() as session:
            session.add(
                ProductTable(
                    id=product_id,
                    name=name or f"Product {product_id}",
                    category_id=category_id,
                    price_cents=int(Decimal(price) * 100),
                    stock=stock,
                )
            )
            await session.commit()
        return product_id

    return add


@pytest.fixture
async def customer(session_factory: async_sessionmaker[AsyncSession]) -> int:
    async with session_factory() as session:
        session.add(CustomerTable(id=77, name="Test Customer", since=date(2020, 1, 1)))
        await session.commit()
    return 77
