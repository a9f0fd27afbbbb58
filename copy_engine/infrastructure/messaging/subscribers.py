"""Default event subscribers.

Outcome events are logged so every copy attempt leaves a trace even when no
notification channel is wired in.
"""

import logging

from copy_engine.domain.copying.events import (
    CopyExecutedEvent,
    CopyOrderCancelledEvent,
    CopyOrderFilledEvent,
    DelayedCopyScheduledEvent,
)

from .event_bus import EventBus

logger = logging.getLogger(__name__)


async def log_copy_executed(event: CopyExecutedEvent) -> None:
    extra = {
        "copy_order_id": event.copy_order_id,
        "follower_id": event.follower_id,
        "leader_trade_id": event.leader_trade_id,
        "symbol": event.symbol,
        "side": event.side,
        "quantity": event.quantity,
        "status": event.status,
    }
    if event.status == "failed":
        logger.warning("copy_executed.failed", extra={**extra, "error": event.error})
    else:
        logger.info("copy_executed.placed", extra=extra)


async def log_copy_cancelled(event: CopyOrderCancelledEvent) -> None:
    logger.info(
        "copy_order_cancelled",
        extra={"copy_order_id": event.copy_order_id, "follower_id": event.follower_id},
    )


async def log_copy_filled(event: CopyOrderFilledEvent) -> None:
    logger.info(
        "copy_order_filled",
        extra={"copy_order_id": event.copy_order_id, "quantity": event.quantity},
    )


async def log_delayed_copy_scheduled(event: DelayedCopyScheduledEvent) -> None:
    logger.info(
        "delayed_copy_scheduled",
        extra={
            "delayed_copy_order_id": event.delayed_copy_order_id,
            "follower_id": event.follower_id,
            "scheduled_for": event.scheduled_for.isoformat(),
        },
    )


def register_default_subscribers(event_bus: EventBus) -> None:
    """Attach the logging subscribers (idempotent per bus)."""
    defaults = (
        (CopyExecutedEvent, log_copy_executed),
        (CopyOrderCancelledEvent, log_copy_cancelled),
        (CopyOrderFilledEvent, log_copy_filled),
        (DelayedCopyScheduledEvent, log_delayed_copy_scheduled),
    )
    for event_type, handler in defaults:
        if event_bus.get_subscribers_count(event_type) == 0:
            event_bus.subscribe(event_type, handler)
