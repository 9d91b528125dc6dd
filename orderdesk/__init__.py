"""
orderdesk — order management with inventory consistency and discounts.

    from orderdesk import catalog as P   # Products and stock
    from orderdesk import orders as O    # Order lifecycle and reads
    from orderdesk import discount as D  # Discount rules
    from orderdesk import cache as C     # Two-tier read-through cache
"""

from orderdesk import db
from orderdesk import catalog
from orderdesk import cache
from orderdesk import orders
from orderdesk import discount
from orderdesk._types import (
    CustomerId,
    ProductId,
    CategoryId,
    OrderId,
    OrderDeskError,
    NotFound,
    StoreUnavailable,
    money,
)
from orderdesk.config import Settings
from orderdesk.services import Services, build_services

__version__ = "0.1.0"

__all__ = (
    "db",
    "catalog",
    "cache",
    "orders",
    "discount",
    "CustomerId",
    "ProductId",
    "CategoryId",
    "OrderId",
    "OrderDeskError",
    "NotFound",
    "StoreUnavailable",
    "money",
    "Settings",
    "Services",
    "build_services",
)
