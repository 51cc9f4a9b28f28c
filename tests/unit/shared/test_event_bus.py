"""Unit tests for the in-memory event bus."""

from __future__ import annotations

import pytest

from modules.orders.events import OrderCancelled, OrderPlaced
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


class _Recorder:
    def __init__(self):
        self.seen = []

    def handle(self, event):
        self.seen.append(event)


class _Exploding:
    def handle(self, event):
        raise RuntimeError("handler down")


@pytest.fixture()
def bus():
    return InMemoryEventBus()


def test_publish_reaches_handlers_of_that_class_only(bus):
    placed, cancelled = _Recorder(), _Recorder()
    bus.subscribe(OrderPlaced, placed)
    bus.subscribe(OrderCancelled, cancelled)
    event = OrderPlaced(aggregate_id=1, account_id=2, product_ids=(3,), total_amount="1.00")

    assert bus.publish(event) == 1
    assert placed.seen == [event]
    assert cancelled.seen == []


def test_base_class_subscriber_sees_every_event(bus):
    audit, placed = _Recorder(), _Recorder()
    bus.subscribe(DomainEvent, audit)
    bus.subscribe(OrderPlaced, placed)

    assert bus.handlers_for(OrderPlaced) == [placed, audit]
    bus.publish(OrderCancelled(aggregate_id=9))

    assert [event.event_name for event in audit.seen] == ["OrderCancelled"]


def test_subscribing_twice_delivers_once(bus):
    recorder = _Recorder()
    bus.subscribe(OrderCancelled, recorder)
    bus.subscribe(OrderCancelled, recorder)

    assert bus.publish(OrderCancelled(aggregate_id=4)) == 1


def test_no_subscribers_delivers_nothing(bus):
    assert bus.publish(OrderCancelled(aggregate_id=4)) == 0


def test_handler_error_reaches_publisher(bus):
    bus.subscribe(OrderCancelled, _Exploding())

    with pytest.raises(RuntimeError, match="handler down"):
        bus.publish(OrderCancelled(aggregate_id=4))
