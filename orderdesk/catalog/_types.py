"""
Catalog types.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from orderdesk._types import CategoryId, NotFound, OrderDeskError, ProductId

# ═══════════════════════════════════════════════════════════════════════════════
# Product
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    """Snapshot of a catalog row. `stock` is never negative."""

    id: ProductId
    name: str
    category_id: CategoryId
    price: Decimal
    stock: int


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ProductNotFound(NotFound):
    entity: ClassVar[str] = "Product"


@dataclass(frozen=True, slots=True)
class InsufficientStock(OrderDeskError):
    """Requested quantity exceeds available stock. Business rule, never retried."""

    product_id: ProductId
    product_name: str
    requested: int
    available: int

    def __str__(self) -> str:
        return f"Insufficient stock for product {self.product_name}"


__all__ = (
    "Product",
    "ProductNotFound",
    "InsufficientStock",
)
