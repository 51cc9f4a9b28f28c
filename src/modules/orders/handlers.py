"""Event handlers for Orders domain events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import structlog
from django.conf import settings

from modules.orders.events import OrderCancelled, OrderPlaced
from shared.domain.bus import IEventHandler

if TYPE_CHECKING:
    from modules.catalog.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class LowStockAlertHandler(IEventHandler[OrderPlaced]):
    """Warn about products an order pushed below the low-stock threshold."""

    def __init__(self, product_repository: Optional[IProductRepository] = None) -> None:
        self._product_repo = product_repository

    def _repository(self) -> IProductRepository:
        if self._product_repo is None:
            from modules.catalog.repositories.django_repository import (
                ProductDjangoRepository,
            )

            self._product_repo = ProductDjangoRepository()
        return self._product_repo

    def handle(self, event: OrderPlaced) -> None:
        threshold = settings.LOW_STOCK_THRESHOLD
        running_low = self._repository().low_stock(threshold).filter(
            id__in=event.product_ids
        )
        for product in running_low:
            logger.warning(
                "catalog.low_stock",
                order_id=event.aggregate_id,
                product_id=product.id,
                stock=product.stock,
                threshold=threshold,
            )


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.cancellation_processed",
            order_id=event.aggregate_id,
            account_id=event.account_id,
            restored_products=list(event.product_ids),
        )


low_stock_alert_handler = LowStockAlertHandler()
order_cancelled_handler = OrderCancelledHandler()
