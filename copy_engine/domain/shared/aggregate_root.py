"""Base AggregateRoot class for the domain model.

An aggregate root is the single entry point into an aggregate. It keeps the
aggregate consistent and records the domain events produced by its changes.
"""

from typing import List

from .domain_event import DomainEvent
from .entity import Entity


class AggregateRoot(Entity):
    """Base class for aggregate roots.

    Events are collected on the aggregate and published by the application
    layer only after the surrounding transaction commits.

    Example:
        >>> order = CopyOrder.create_queued(...)
        >>> order.mark_placed(receipt)
        >>> await uow.copy_orders.save(order)
        >>> await uow.commit()
        >>> await event_bus.publish_all(order.get_domain_events())
        >>> order.clear_domain_events()
    """

    def __init__(self, id: int | None = None) -> None:
        super().__init__(id)
        self._domain_events: List[DomainEvent] = []

    def add_domain_event(self, event: DomainEvent) -> None:
        """Add domain event to the pending events list.

        Args:
            event: Domain event to add.
        """
        self._domain_events.append(event)

    def get_domain_events(self) -> List[DomainEvent]:
        """Get all pending domain events.

        Returns:
            Copy of the events recorded since the last clear.
        """
        return self._domain_events.copy()

    def clear_domain_events(self) -> None:
        """Clear pending domain events after they were published."""
        self._domain_events.clear()

    @property
    def has_domain_events(self) -> bool:
        """Check if aggregate has unpublished domain events."""
        return len(self._domain_events) > 0
