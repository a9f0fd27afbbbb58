"""Event Bus - in-process delivery of domain events.

Aggregates record events (CopyExecuted, CopyOrderCancelled, ...); handlers
publish them here after the transaction commits. Subscribers never see
events of a rolled back transaction.
"""

import logging
from collections import defaultdict
from typing import Awaitable, Callable, Type

from copy_engine.domain.shared import DomainEvent

logger = logging.getLogger(__name__)

# Async callable receiving the published event
EventHandler = Callable[[DomainEvent], Awaitable[None]]


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__name__", handler.__class__.__name__)


class EventBus:
    """Publish/subscribe by exact event type.

    A failing subscriber is logged and skipped; the remaining subscribers
    still run and the publisher never sees the error.

    Example:
        >>> event_bus = EventBus()
        >>> event_bus.subscribe(CopyExecutedEvent, notify_follower)
        >>> await event_bus.publish_all(order.get_domain_events())
    """

    def __init__(self) -> None:
        self._subscribers: dict[Type[DomainEvent], list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        self._subscribers[event_type].append(handler)
        logger.debug(
            "event_bus.subscription_added",
            extra={"event_type": event_type.__name__, "handler": _handler_name(handler)},
        )

    def unsubscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
            logger.debug(
                "event_bus.subscription_removed",
                extra={"event_type": event_type.__name__, "handler": _handler_name(handler)},
            )

    async def publish(self, event: DomainEvent) -> None:
        """Deliver one event to every subscriber of its type, in order."""
        event_type = type(event)
        handlers = list(self._subscribers.get(event_type, []))

        if not handlers:
            logger.debug(
                "event_bus.no_subscribers",
                extra={"event_type": event_type.__name__},
            )
            return

        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "event_bus.handler_failed",
                    extra={
                        "event_type": event_type.__name__,
                        "handler": _handler_name(handler),
                        "event_id": str(event.event_id),
                        "error": str(e),
                    },
                    exc_info=True,
                )

    async def publish_all(self, events: list[DomainEvent]) -> None:
        for event in events:
            await self.publish(event)

    def clear_subscribers(self) -> None:
        self._subscribers.clear()

    def get_subscribers_count(self, event_type: Type[DomainEvent]) -> int:
        return len(self._subscribers.get(event_type, []))


_event_bus_instance: EventBus | None = None


def get_event_bus() -> EventBus:
    """Process-wide event bus."""
    global _event_bus_instance
    if _event_bus_instance is None:
        _event_bus_instance = EventBus()
    return _event_bus_instance


def reset_event_bus() -> None:
    """Replace the process-wide bus with an empty one (tests)."""
    global _event_bus_instance
    _event_bus_instance = EventBus()
