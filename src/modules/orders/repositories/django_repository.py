"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
``save`` writes the order, its lines and its outbox events in one
``transaction.atomic()`` block; inside the engine's unit of work it
becomes a savepoint of the outer transaction.

Row locks use ``select_for_update()`` without joins so the lock applies
to the order row only.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import Avg, Count, QuerySet, Sum

from modules.core.models import OutboxEvent
from modules.orders.models import Order, OrderLine
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "orders"


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _with_relations(self) -> QuerySet[Order]:
        return Order.objects.select_related("account").prefetch_related(
            "lines__product"
        )

    def get_by_id(self, id: int, *, with_lines: bool = False) -> Optional[Order]:
        """Retrieve an order by primary key.

        ``with_lines=True`` adds ``select_related`` for the account and
        ``prefetch_related`` for lines and their products (no N+1).
        Returns ``None`` for non-existent IDs.
        """
        queryset = self._with_relations() if with_lines else Order.objects.all()
        return queryset.filter(id=id).first()

    def get_for_update(self, id: int) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Lines are prefetched so the caller can iterate over them while the
        row is locked; a second cancellation blocks here until the first
        commits, then finds nothing.
        """
        return (
            Order.objects.select_for_update()
            .prefetch_related("lines")
            .filter(id=id)
            .first()
        )

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Order]:
        """List orders with optional filters and eager-loaded relations.

        Supported filter keys are any ORM look-ups, e.g.
        ``account_id`` or ``created_at__range``.
        """
        queryset = self._with_relations()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    # ------------------------------------------------------------------
    # Save / Delete
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order, lines: Sequence[OrderLine] = ()) -> Order:
        """Persist the order, each line, then the pending domain events."""
        entity.save()
        for line in lines:
            line.order = entity
            line.save()

        event_count = self._flush_events(entity)
        logger.info(
            "order.saved",
            order_id=entity.id,
            line_count=len(lines),
            event_count=event_count,
        )
        return entity

    @transaction.atomic
    def delete(self, entity: Order) -> None:
        """Hard-delete the order; CASCADE removes its lines."""
        order_id = entity.id
        event_count = self._flush_events(entity)
        entity.delete()
        logger.info("order.deleted", order_id=order_id, event_count=event_count)

    def _flush_events(self, entity: Order) -> int:
        events = entity.domain_events
        for event in events:
            OutboxEvent.objects.create(
                event_type=event.event_name,
                aggregate_id=str(event.aggregate_id),
                payload=_serialize_event_payload(event),
                topic=OUTBOX_TOPIC,
            )
        entity.clear_domain_events()
        return len(events)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def count_by_account(self, account_id: int) -> int:
        return Order.objects.filter(account_id=account_id).count()

    def sum_total_by_account(self, account_id: int) -> Optional[Decimal]:
        return Order.objects.filter(account_id=account_id).aggregate(
            value=Sum("total_amount")
        )["value"]

    def avg_total_by_account(self, account_id: int) -> Optional[Decimal]:
        return Order.objects.filter(account_id=account_id).aggregate(
            value=Avg("total_amount")
        )["value"]

    def count_between(self, start: datetime, end: datetime) -> int:
        return Order.objects.filter(created_at__range=(start, end)).count()

    def sum_total_between(self, start: datetime, end: datetime) -> Optional[Decimal]:
        return Order.objects.filter(created_at__range=(start, end)).aggregate(
            value=Sum("total_amount")
        )["value"]

    def top_by_total(self, limit: int) -> List[Order]:
        return list(self._with_relations().order_by("-total_amount", "id")[:limit])

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def by_account(self, account_id: int) -> QuerySet[Order]:
        return self.list({"account_id": account_id}).order_by("-created_at", "-id")

    def with_line_count_at_least(self, min_lines: int) -> QuerySet[Order]:
        return (
            self._with_relations()
            .annotate(line_total=Count("lines", distinct=True))
            .filter(line_total__gte=min_lines)
            .order_by("-line_total", "-id")
        )


def _serialize_event_payload(event: Any) -> Dict[str, Any]:
    data = asdict(event)
    normalized = _normalize_for_json(data)
    return json.loads(json.dumps(normalized))


def _normalize_for_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_normalize_for_json(item) for item in value]
    if isinstance(value, dict):
        return {key: _normalize_for_json(val) for key, val in value.items()}
    return value
