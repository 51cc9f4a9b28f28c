"""Asynchronous tasks of the orders module."""

from __future__ import annotations

from typing import Dict, Optional

import structlog
from celery import shared_task
from django.conf import settings
from django.db import transaction

from modules.core.models import EventStatus, OutboxEvent
from modules.orders.events import ORDER_EVENTS
from modules.orders.repositories.django_repository import OUTBOX_TOPIC
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


@shared_task(name="orders.publish_order_events")
def publish_order_events(batch_size: Optional[int] = None) -> Dict[str, int]:
    """Relay pending order events from the outbox to the event bus.

    Rows are claimed with ``SKIP LOCKED`` so concurrent workers never
    publish the same event twice. A handler failure marks only that row
    failed; the rest of the batch still goes out.
    """
    limit = batch_size or settings.OUTBOX_BATCH_SIZE
    published = failed = 0

    with transaction.atomic():
        pending = list(
            OutboxEvent.objects.select_for_update(skip_locked=True)
            .filter(topic=OUTBOX_TOPIC, status=EventStatus.PENDING)
            .order_by("created_at", "id")[:limit]
        )
        for row in pending:
            event_class = ORDER_EVENTS.get(row.event_type)
            if event_class is None:
                logger.error("outbox.unknown_event", event_type=row.event_type, outbox_id=row.id)
                row.mark_as_failed(f"Unknown event type {row.event_type!r}.")
                failed += 1
                continue
            try:
                # Savepoint per row: a handler's database error must not abort the batch.
                with transaction.atomic():
                    delivered = event_bus.publish(event_class.from_payload(row.payload))
            except Exception as exc:
                logger.exception(
                    "outbox.publish_failed",
                    event_type=row.event_type,
                    outbox_id=row.id,
                )
                row.mark_as_failed(str(exc))
                failed += 1
            else:
                if delivered == 0:
                    logger.debug("outbox.no_subscribers", event_type=row.event_type, outbox_id=row.id)
                row.mark_as_published()
                published += 1

    if pending:
        logger.info("outbox.relayed", published=published, failed=failed)
    return {"published": published, "failed": failed}
