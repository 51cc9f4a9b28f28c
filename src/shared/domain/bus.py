"""Ports for in-process delivery of domain events.

Order events reach their handlers only after the outbox relay has read
them back from storage, so a handler always sees a committed change.
"""

from __future__ import annotations

from typing import Generic, Protocol, Sequence, Type, TypeVar

from shared.domain.events import DomainEvent

E = TypeVar("E", bound=DomainEvent, contravariant=True)


class IEventHandler(Protocol, Generic[E]):
    """Reacts to one kind of event. Errors propagate to the publisher."""

    def handle(self, event: E) -> None: ...


class IEventBus(Protocol):
    def publish(self, event: DomainEvent) -> int:
        """Deliver ``event`` and return how many handlers received it."""
        ...

    def subscribe(self, event_class: Type[E], handler: IEventHandler[E]) -> None: ...

    def handlers_for(self, event_class: Type[DomainEvent]) -> Sequence[IEventHandler]:
        """Handlers that would receive an event of ``event_class``."""
        ...
