"""Domain Events for the Copying bounded context."""

from .copy_events import (
    CopyExecutedEvent,
    CopyOrderCancelledEvent,
    CopyOrderFilledEvent,
    DelayedCopyScheduledEvent,
)

__all__ = [
    "CopyExecutedEvent",
    "CopyOrderCancelledEvent",
    "CopyOrderFilledEvent",
    "DelayedCopyScheduledEvent",
]
