"""Order service layer (Use Cases).

``OrderService`` is the order fulfillment engine: it creates and cancels
orders, keeping product stock consistent with the orders that exist.
Each command runs as one unit of work; a failure at any step rolls back
every stock write made before it.

``OrderReportService`` computes read-side figures. SQL aggregates over an
empty set are NULL; they are reported as zero.

Business rules enforced:
- An order has at least one line and every quantity is at least one.
- Only existing, enabled accounts can place orders.
- A line can never take more units than the product has in stock.
- Line subtotals and the order total must fit their stored columns.
- Line prices are snapshotted once per request, right after the product
  rows are locked; all lines for the same product share one price.
- Cancelling restores every line's quantity and deletes the order.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

import structlog
from django.conf import settings
from django.db.models import QuerySet

from modules.accounts.exceptions import AccountNotFound
from modules.catalog.exceptions import ProductNotFound
from modules.core.decorators import returns_result, unit_of_work
from modules.core.exceptions import ValidationFailed
from modules.core.money import money
from modules.core.results import Err, Result
from modules.orders.dtos import OrderSummaryDTO, SalesReportDTO, TopOrderDTO
from modules.orders.events import OrderCancelled, OrderPlaced
from modules.orders.exceptions import (
    AccountDisabled,
    EmptyOrder,
    InsufficientStock,
    InvalidDateRange,
    InvalidQuantity,
    OrderAmountTooLarge,
    OrderNotFound,
    OrphanedOrderLine,
)
from modules.orders.models import Order, OrderLine

if TYPE_CHECKING:
    from modules.accounts.repositories.interfaces import IAccountRepository
    from modules.catalog.repositories.interfaces import IProductRepository
    from modules.orders.dtos import CreateOrderDTO, CreateOrderLineDTO
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


def amount_capacity(model: Any, field_name: str) -> Decimal:
    """Largest value a ``DecimalField`` of ``model`` can hold."""
    field = model._meta.get_field(field_name)
    step = Decimal(1).scaleb(-field.decimal_places)
    return Decimal(10) ** (field.max_digits - field.decimal_places) - step


class OrderService:
    """Application service for Order use-cases.

    Receives the three stores via constructor injection (DIP). The account
    placing an order is always passed in explicitly.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        account_repository: IAccountRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._order_repo = order_repository
        self._account_repo = account_repository
        self._product_repo = product_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(self, dto: CreateOrderDTO) -> Result[Order]:
        """Create an order, reserving stock for every line atomically.

        Steps:
        1. Reject an empty order or a quantity below one (no store access).
        2. Resolve the account; it must exist and be enabled.
        3. Lock every referenced product (ascending id) and snapshot prices.
        4. For each line in request order: check stock, decrement it,
           accumulate the subtotal and build the line.
        5. Persist order + lines and record ``OrderPlaced``.

        Returns ``Ok(order)`` with lines loaded, or ``Err`` with kind
        VALIDATION, NOT_FOUND, BUSINESS_RULE or INSUFFICIENT_STOCK.
        """
        rejection = self._check_lines(dto.lines)
        if rejection is not None:
            return rejection
        return self._place_order(dto)

    @unit_of_work
    def _place_order(self, dto: CreateOrderDTO) -> Order:
        log = logger.bind(account_id=dto.account_id, line_count=len(dto.lines))
        log.info("order.creation_started")

        # 1. Account
        account = self._account_repo.get_by_id(dto.account_id)
        if not account:
            raise AccountNotFound(
                f"Account {dto.account_id} not found.", account_id=dto.account_id
            )
        if not account.is_enabled:
            raise AccountDisabled(
                f"Account {dto.account_id} is disabled.", account_id=dto.account_id
            )

        # 2. Lock products in id order, then snapshot prices once
        products = self._product_repo.lock_many(line.product_id for line in dto.lines)
        prices = {product_id: product.price for product_id, product in products.items()}

        # 3. Lines, in request order
        total = Decimal("0.00")
        lines: List[OrderLine] = []
        subtotal_cap = amount_capacity(OrderLine, "subtotal")
        total_cap = amount_capacity(Order, "total_amount")
        for index, line_dto in enumerate(dto.lines, start=1):
            product = products.get(line_dto.product_id)
            if product is None:
                raise ProductNotFound(
                    f"Product {line_dto.product_id} not found.",
                    product_id=line_dto.product_id,
                )
            if line_dto.quantity > product.stock:
                raise InsufficientStock(
                    product_id=product.id,
                    product_name=product.name,
                    requested=line_dto.quantity,
                    available=product.stock,
                )

            unit_price = prices[product.id]
            subtotal = unit_price * line_dto.quantity
            if subtotal > subtotal_cap:
                raise OrderAmountTooLarge(
                    f"Line {index}: subtotal {subtotal} exceeds the maximum of {subtotal_cap}.",
                    line=index,
                    product_id=product.id,
                    subtotal=str(subtotal),
                )
            total += subtotal
            if total > total_cap:
                raise OrderAmountTooLarge(
                    f"Order total {total} exceeds the maximum of {total_cap}.",
                    line=index,
                    total_amount=str(total),
                )

            self._product_repo.adjust_stock(product, -line_dto.quantity)
            log.info(
                "order.stock_reserved",
                product_id=product.id,
                quantity=line_dto.quantity,
                remaining=product.stock,
            )

            lines.append(
                OrderLine(product=product, quantity=line_dto.quantity, unit_price=unit_price)
            )

        # 4. Persist order + lines
        order = self._order_repo.save(Order(account=account, total_amount=total), lines)
        order.add_domain_event(
            OrderPlaced(
                aggregate_id=order.id,
                account_id=account.id,
                product_ids=tuple(sorted(products)),
                total_amount=str(total),
            )
        )
        self._order_repo.save(order)

        log.info("order.created", order_id=order.id, total_amount=str(total))
        return self._order_repo.get_by_id(order.id, with_lines=True)

    @unit_of_work
    def cancel_order(self, order_id: int) -> None:
        """Cancel an order: restore each line's stock, then delete it.

        Locks the order row **first** so two concurrent cancellations
        cannot restore stock twice.

        Raises (returned as ``Err``):
            OrderNotFound: the order does not exist.
            OrphanedOrderLine: a line no longer resolves to a product.
        """
        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.", order_id=order_id)

        log = logger.bind(order_id=order_id, account_id=order.account_id)

        lines = list(order.lines.all())
        products = self._product_repo.lock_many(
            line.product_id for line in lines if line.product_id is not None
        )
        for line in lines:
            product = products.get(line.product_id)
            if product is None:
                log.error("order.orphaned_line", line_id=line.id)
                raise OrphanedOrderLine(
                    f"Order {order_id} line {line.id} has no product; "
                    "stock cannot be restored.",
                    order_id=order_id,
                    line_id=line.id,
                )
            self._product_repo.adjust_stock(product, line.quantity)
            log.info(
                "order.stock_released",
                product_id=product.id,
                quantity=line.quantity,
                restored_stock=product.stock,
            )

        order.add_domain_event(
            OrderCancelled(
                aggregate_id=order.id,
                account_id=order.account_id,
                product_ids=tuple(sorted(products)),
            )
        )
        self._order_repo.delete(order)
        log.info("order.cancelled")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @returns_result
    def get_order(self, order_id: int) -> Order:
        order = self._order_repo.get_by_id(order_id, with_lines=True)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.", order_id=order_id)
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Order]:
        """Return orders, optionally filtered, with lines eager-loaded."""
        return self._order_repo.list(filters)

    @returns_result
    def orders_for_account(self, account_id: int) -> QuerySet[Order]:
        """Orders of one account, newest first."""
        if not self._account_repo.get_by_id(account_id):
            raise AccountNotFound(f"Account {account_id} not found.", account_id=account_id)
        return self._order_repo.by_account(account_id)

    @returns_result
    def large_orders(self, min_lines: Optional[int] = None) -> QuerySet[Order]:
        """Orders with at least ``min_lines`` lines (``LARGE_ORDER_MIN_LINES``)."""
        if min_lines is None:
            min_lines = settings.LARGE_ORDER_MIN_LINES
        if min_lines < 1:
            raise ValidationFailed("min_lines must be at least 1.", min_lines=min_lines)
        return self._order_repo.with_line_count_at_least(min_lines)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_lines(lines: Sequence[CreateOrderLineDTO]) -> Optional[Err]:
        try:
            if not lines:
                raise EmptyOrder("An order needs at least one line.")
            for position, line in enumerate(lines, start=1):
                if line.quantity < 1:
                    raise InvalidQuantity(
                        f"Line {position}: quantity must be at least 1.",
                        line=position,
                        product_id=line.product_id,
                        quantity=line.quantity,
                    )
        except ValidationFailed as exc:
            logger.info("order.rejected", kind=str(exc.kind), reason=exc.message)
            return exc.to_result()
        return None


class OrderReportService:
    """Read-side reporting over committed orders."""

    def __init__(
        self,
        order_repository: IOrderRepository,
        account_repository: IAccountRepository,
    ) -> None:
        self._order_repo = order_repository
        self._account_repo = account_repository

    @returns_result
    def account_summary(self, account_id: int) -> OrderSummaryDTO:
        """Count, revenue and average order amount for one account.

        An account without orders reports ``0`` / ``0.00`` / ``0.00``.
        """
        if not self._account_repo.get_by_id(account_id):
            raise AccountNotFound(f"Account {account_id} not found.", account_id=account_id)

        return OrderSummaryDTO(
            account_id=account_id,
            total_orders=self._order_repo.count_by_account(account_id),
            total_revenue=money(self._order_repo.sum_total_by_account(account_id)),
            average_order_amount=money(self._order_repo.avg_total_by_account(account_id)),
        )

    @returns_result
    def sales_report(self, start: datetime, end: datetime) -> SalesReportDTO:
        """Orders created in ``[start, end]`` plus the overall top orders.

        The top list ranks all orders, not only those inside the range.
        """
        if start > end:
            raise InvalidDateRange(
                "Report start must not be after its end.",
                start=start.isoformat(),
                end=end.isoformat(),
            )

        return SalesReportDTO(
            start=start,
            end=end,
            order_count=self._order_repo.count_between(start, end),
            total_revenue=money(self._order_repo.sum_total_between(start, end)),
            top_orders=self._top(settings.TOP_ORDERS_LIMIT),
        )

    @returns_result
    def top_orders(self, limit: Optional[int] = None) -> List[TopOrderDTO]:
        if limit is None:
            limit = settings.TOP_ORDERS_LIMIT
        if limit < 1:
            raise ValidationFailed("Limit must be at least 1.", limit=limit)
        return self._top(limit)

    def _top(self, limit: int) -> List[TopOrderDTO]:
        return [TopOrderDTO.from_entity(order) for order in self._order_repo.top_by_total(limit)]
