"""
Core types for orderdesk.

Re-exports from kungfu + money helpers + the shared error base.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import ClassVar

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Identifiers
# ═══════════════════════════════════════════════════════════════════════════════

type CustomerId = int
type ProductId = int
type CategoryId = int
type OrderId = int

# ═══════════════════════════════════════════════════════════════════════════════
# Money — fixed-point, two decimals
# ═══════════════════════════════════════════════════════════════════════════════

CENT = Decimal("0.01")


def money(value: Decimal | int | str) -> Decimal:
    """Quantize to cents, rounding half away from zero."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Decimal) -> int:
    return int(money(value) * 100)


def from_cents(cents: int) -> Decimal:
    return money(Decimal(cents) / 100)


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class OrderDeskError(Exception):
    """
    Base for every error value produced by orderdesk.

    Errors travel inside `Error(...)`; they subclass Exception so they can
    also be raised across `catching_async` boundaries and chained as causes.
    """


@dataclass(frozen=True, slots=True)
class NotFound(OrderDeskError):
    """Referenced entity is absent (or soft-deleted)."""

    entity: ClassVar[str] = "Entity"
    id: int

    def __str__(self) -> str:
        return f"{self.entity} {self.id} not found"


@dataclass(frozen=True, slots=True)
class StoreUnavailable(OrderDeskError):
    """Source-of-truth read failed (not a cache failure)."""

    message: str

    def __str__(self) -> str:
        return self.message


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Aliases
    "CustomerId",
    "ProductId",
    "CategoryId",
    "OrderId",
    # Money
    "CENT",
    "money",
    "to_cents",
    "from_cents",
    # Errors
    "OrderDeskError",
    "NotFound",
    "StoreUnavailable",
)
