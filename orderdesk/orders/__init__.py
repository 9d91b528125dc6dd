"""
Orders — lifecycle with inventory consistency, cached reads.

    from orderdesk import orders as O

    lifecycle = O.OrderLifecycle(session_factory, read_cache)

    match await lifecycle.create(customer_id, [O.LineRequest(100, 2)]):
        case Ok(order): ...
        case Error(InsufficientStock() as e): ...
        case Error(O.OrderCreationFailed() as e): ...
"""

from orderdesk.orders._types import (
    Customer,
    OrderItem,
    Order,
    LineRequest,
    PricedLine,
    LifecycleState,
    OrderNotFound,
    CustomerNotFound,
    InvalidQuantity,
    OrderMutationFailed,
    OrderCreationFailed,
    OrderUpdateFailed,
    OrderDeletionFailed,
    LineError,
    CreateError,
    UpdateError,
    DeleteError,
)
from orderdesk.orders._repo import load_order, load_orders
from orderdesk.orders._builder import prepare_line, prepare_items
from orderdesk.orders._reads import OrderReadCache, order_key, ALL_KEY
from orderdesk.orders._lifecycle import OrderLifecycle, OrderTransaction

__all__ = (
    # Types
    "Customer",
    "OrderItem",
    "Order",
    "LineRequest",
    "PricedLine",
    "LifecycleState",
    # Errors
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
    # Reads
    "load_order",
    "load_orders",
    "OrderReadCache",
    "order_key",
    "ALL_KEY",
    # Writes
    "prepare_line",
    "prepare_items",
    "OrderLifecycle",
    "OrderTransaction",
)
