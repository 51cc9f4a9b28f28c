"""Order domain exceptions.

Raised by the order services inside a unit of work so every stock write
rolls back; the boundary returns them as ``Err`` results.
"""

from __future__ import annotations

from modules.core.exceptions import (
    BusinessRuleViolation,
    DomainError,
    NotFound,
    ValidationFailed,
)
from modules.core.results import ErrorKind


class EmptyOrder(ValidationFailed):
    """An order needs at least one line."""


class InvalidQuantity(ValidationFailed):
    """Line quantities must be at least one."""


class InvalidDateRange(ValidationFailed):
    """Report range starts after it ends."""


class OrderNotFound(NotFound):
    """The requested order does not exist."""


class AccountDisabled(BusinessRuleViolation):
    """A disabled account cannot place orders."""


class OrphanedOrderLine(BusinessRuleViolation):
    """An order line no longer resolves to a product; stock cannot be restored."""


class InsufficientStock(DomainError):
    """Requested quantity exceeds the product's current stock."""

    kind = ErrorKind.INSUFFICIENT_STOCK

    def __init__(self, product_id: int, product_name: str, requested: int, available: int) -> None:
        super().__init__(
            f"Product {product_name}: requested {requested}, available {available}.",
            product_id=product_id,
            product_name=product_name,
            requested=requested,
            available=available,
        )


class OrderAmountTooLarge(ValidationFailed):
    """A line subtotal or the order total exceeds what an order can store."""
