"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple, Type

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderPlaced(DomainEvent):
    """Raised when an order is created and its stock reserved."""

    account_id: int = 0
    product_ids: Tuple[int, ...] = ()
    total_amount: str = "0.00"


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled and its stock restored."""

    account_id: int = 0
    product_ids: Tuple[int, ...] = ()


ORDER_EVENTS: Dict[str, Type[DomainEvent]] = {
    event_class.__name__: event_class for event_class in (OrderPlaced, OrderCancelled)
}
