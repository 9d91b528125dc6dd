"""
Order types — aggregates, line requests, lifecycle states, errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum, auto
from typing import ClassVar

from orderdesk._types import (
    CustomerId,
    NotFound,
    OrderDeskError,
    OrderId,
    ProductId,
)
from orderdesk.catalog import Product, ProductNotFound, InsufficientStock

# ═══════════════════════════════════════════════════════════════════════════════
# Aggregates — always fully loaded, never lazy
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Customer:
    id: CustomerId
    name: str
    since: date


@dataclass(frozen=True, slots=True)
class OrderItem:
    id: int
    order_id: OrderId
    product: Product
    quantity: int
    unit_price: Decimal  # snapshot at order time
    total: Decimal

    @property
    def product_id(self) -> ProductId:
        return self.product.id


@dataclass(frozen=True, slots=True)
class Order:
    id: OrderId
    customer: Customer
    total: Decimal
    items: tuple[OrderItem, ...]
    created_at: datetime
    updated_at: datetime

    @property
    def customer_id(self) -> CustomerId:
        return self.customer.id


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Lines
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LineRequest:
    """One requested cart line."""

    product_id: ProductId
    quantity: int


@dataclass(frozen=True, slots=True)
class PricedLine:
    """Validated line, stock already reserved in the current transaction."""

    product_id: ProductId
    quantity: int
    unit_price: Decimal
    total: Decimal


# ═══════════════════════════════════════════════════════════════════════════════
# Lifecycle State
# ═══════════════════════════════════════════════════════════════════════════════


class LifecycleState(Enum):
    """States of one order transaction."""

    STARTED = auto()
    ITEMS_PREPARED = auto()
    PERSISTED = auto()
    COMMITTED = auto()
    ROLLED_BACK = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderNotFound(NotFound):
    entity: ClassVar[str] = "Order"


@dataclass(frozen=True, slots=True)
class CustomerNotFound(NotFound):
    entity: ClassVar[str] = "Customer"


@dataclass(frozen=True, slots=True)
class InvalidQuantity(OrderDeskError):
    product_id: ProductId
    quantity: int

    def __str__(self) -> str:
        return f"Quantity for product {self.product_id} must be at least 1, got {self.quantity}"


@dataclass(frozen=True, slots=True)
class OrderMutationFailed(OrderDeskError):
    """Unexpected failure during a write; the transaction was rolled back."""

    operation: ClassVar[str] = "mutate"
    order_id: OrderId | None
    cause: Exception

    def __str__(self) -> str:
        target = f"order {self.order_id}" if self.order_id is not None else "order"
        return f"Failed to {self.operation} {target}: {self.cause}"


@dataclass(frozen=True, slots=True)
class OrderCreationFailed(OrderMutationFailed):
    operation: ClassVar[str] = "create"


@dataclass(frozen=True, slots=True)
class OrderUpdateFailed(OrderMutationFailed):
    operation: ClassVar[str] = "update"


@dataclass(frozen=True, slots=True)
class OrderDeletionFailed(OrderMutationFailed):
    operation: ClassVar[str] = "delete"


type LineError = ProductNotFound | InvalidQuantity | InsufficientStock
"""First failing line of a batch."""

type CreateError = CustomerNotFound | LineError | OrderCreationFailed
type UpdateError = OrderNotFound | LineError | OrderUpdateFailed
type DeleteError = OrderNotFound | OrderDeletionFailed


__all__ = (
    "Customer",
    "OrderItem",
    "Order",
    "LineRequest",
    "PricedLine",
    "LifecycleState",
    "OrderNotFound",
    "CustomerNotFound",
    "InvalidQuantity",
    "OrderMutationFailed",
    "OrderCreationFailed",
    "OrderUpdateFailed",
    "OrderDeletionFailed",
    "LineError",
    "CreateError",
    "UpdateError",
    "DeleteError",
)
