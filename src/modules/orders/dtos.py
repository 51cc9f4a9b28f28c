"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer. DTOs are immutable (``frozen=True``).

- ``CreateOrderLineDTO``: one requested (product, quantity) pair.
- ``CreateOrderDTO``: input for order creation; the account id is explicit.
- ``OrderSummaryDTO``: per-account count / total / average.
- ``SalesReportDTO``: date-range count / revenue plus top orders.

Emptiness and quantity rules are checked by ``OrderService`` so that a
rejected request is reported as a validation result, not a parse error.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from modules.orders.models import Order


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderLineDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: int
    quantity: int


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Several lines may reference the same product; each one is checked
    against the stock left by the lines before it.
    """

    model_config = ConfigDict(frozen=True)

    account_id: int
    lines: List[CreateOrderLineDTO]


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class TopOrderDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    account_id: int
    total_amount: Decimal
    line_count: int
    created_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> TopOrderDTO:
        """Assumes ``lines`` are prefetched."""
        return cls(
            id=order.id,
            account_id=order.account_id,
            total_amount=order.total_amount,
            line_count=len(order.lines.all()),
            created_at=order.created_at,
        )


class OrderSummaryDTO(BaseModel):
    """Order statistics for one account. Zero orders report zeros."""

    model_config = ConfigDict(frozen=True)

    account_id: int
    total_orders: int
    total_revenue: Decimal
    average_order_amount: Decimal


class SalesReportDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    order_count: int
    total_revenue: Decimal
    top_orders: List[TopOrderDTO]
