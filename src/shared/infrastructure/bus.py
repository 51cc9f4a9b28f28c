"""In-memory event bus used by the outbox relay."""

from __future__ import annotations

from typing import Dict, List, Sequence, Type

import structlog

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    """Synchronous bus keyed by event class.

    A handler subscribed to a base class also receives its subclasses, so
    subscribing to ``DomainEvent`` sees every order event. Handlers run
    most specific class first, then in subscription order.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def handlers_for(self, event_class: Type[DomainEvent]) -> Sequence[IEventHandler]:
        matched: List[IEventHandler] = []
        for klass in event_class.__mro__:
            for handler in self._handlers.get(klass, ()):
                if handler not in matched:
                    matched.append(handler)
        return matched

    def publish(self, event: DomainEvent) -> int:
        handlers = self.handlers_for(type(event))
        logger.debug(
            "event_bus.publish",
            event_name=event.event_name,
            aggregate_id=event.aggregate_id,
            handler_count=len(handlers),
        )
        for handler in handlers:
            handler.handle(event)
        return len(handlers)


event_bus = InMemoryEventBus()
