"""Order repository interface (the Order Store).

Extends ``IRepository[Order]`` with what the fulfillment engine needs:
explicit fetch variants (with or without lines, row-locked), explicit
``save`` of an order together with its lines, and the aggregate queries
behind reporting. Aggregates return ``None`` when no row matches; the
engine decides how to present that.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderLine


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root."""

    # ------------------------------------------------------------------
    # Fetch variants
    # ------------------------------------------------------------------

    @abstractmethod
    def get_by_id(self, id: int, *, with_lines: bool = False) -> Optional[Order]:
        """Retrieve an order; ``with_lines`` eager-loads lines and products."""

    @abstractmethod
    def get_for_update(self, id: int) -> Optional[Order]:
        """Retrieve an order with a row-level lock and its lines loaded."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Order]":
        """List orders (account and lines eager-loaded)."""

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @abstractmethod
    def save(self, entity: Order, lines: Sequence[OrderLine] = ()) -> Order:
        """Persist the order, then each of *lines*, then pending domain events."""

    @abstractmethod
    def delete(self, entity: Order) -> None:
        """Flush pending domain events and delete the order with its lines."""

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    @abstractmethod
    def count_by_account(self, account_id: int) -> int: ...

    @abstractmethod
    def sum_total_by_account(self, account_id: int) -> Optional[Decimal]: ...

    @abstractmethod
    def avg_total_by_account(self, account_id: int) -> Optional[Decimal]: ...

    @abstractmethod
    def count_between(self, start: datetime, end: datetime) -> int: ...

    @abstractmethod
    def sum_total_between(self, start: datetime, end: datetime) -> Optional[Decimal]: ...

    @abstractmethod
    def top_by_total(self, limit: int) -> List[Order]:
        """The *limit* largest orders by total amount."""

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    @abstractmethod
    def by_account(self, account_id: int) -> "models.QuerySet[Order]":
        """Orders of one account, newest first."""

    @abstractmethod
    def with_line_count_at_least(self, min_lines: int) -> "models.QuerySet[Order]":
        """Orders with at least *min_lines* lines, largest first."""

