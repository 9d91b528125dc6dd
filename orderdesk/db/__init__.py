"""
DB — SQLAlchemy tables and session factory.

    from orderdesk import db

    session_factory, engine = await db.create_database("sqlite+aiosqlite:///orders.db")
"""

from orderdesk.db._tables import (
    Base,
    CustomerTable,
    ProductTable,
    OrderTable,
    OrderItemTable,
    CacheEntryTable,
)
from orderdesk.db._session import create_database

__all__ = (
    "Base",
    "CustomerTable",
    "ProductTable",
    "OrderTable",
    "OrderItemTable",
    "CacheEntryTable",
    "create_database",
)
