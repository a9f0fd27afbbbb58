"""Base DomainEvent class for event-driven architecture."""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent(ABC):
    """Base class for all domain events.

    Events are immutable facts named in the past tense (CopyExecuted,
    CopyOrderCancelled). Each event carries a unique ID and a UTC timestamp.

    Example:
        >>> @dataclass(frozen=True)
        ... class CopyOrderCancelledEvent(DomainEvent):
        ...     copy_order_id: int
        ...     follower_id: int

        >>> event_bus.subscribe(CopyOrderCancelledEvent, notify_follower)
    """

    event_id: UUID = field(default_factory=uuid4, init=False)
    """Unique event ID (auto-generated)."""

    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), init=False
    )
    """When the event happened (auto-generated, UTC)."""

    @property
    def event_name(self) -> str:
        """Get event class name (e.g., "CopyExecutedEvent")."""
        return self.__class__.__name__

    def __repr__(self) -> str:
        return f"{self.event_name}(event_id={self.event_id}, occurred_at={self.occurred_at})"
