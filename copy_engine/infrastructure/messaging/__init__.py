"""Messaging infrastructure - Event Bus for domain events."""

from .event_bus import EventBus, EventHandler, get_event_bus, reset_event_bus
from .subscribers import register_default_subscribers

__all__ = [
    "EventBus",
    "EventHandler",
    "get_event_bus",
    "reset_event_bus",
    "register_default_subscribers",
]
