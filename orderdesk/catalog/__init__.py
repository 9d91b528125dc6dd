"""
Catalog — products and stock.

    from orderdesk import catalog as P

    product = await P.lock(session, product_id)
    match await P.decrease(session, product, 2):
        case Ok(updated): ...
        case Error(InsufficientStock() as e): ...
"""

from orderdesk.catalog._types import (
    Product,
    ProductNotFound,
    InsufficientStock,
)
from orderdesk.catalog._stock import (
    has_stock,
    get,
    lock,
    decrease,
    increase,
)

__all__ = (
    "Product",
    "ProductNotFound",
    "InsufficientStock",
    "has_stock",
    "get",
    "lock",
    "decrease",
    "increase",
)
