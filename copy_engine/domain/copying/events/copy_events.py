"""Domain Events for the Copying bounded context."""

from dataclasses import dataclass
from datetime import datetime

from copy_engine.domain.shared import DomainEvent


@dataclass(frozen=True)
class CopyExecutedEvent(DomainEvent):
    """Event: a copy order reached the brokerage outcome.

    Emitted exactly once per copy order, with status "placed" or "failed".
    This is the only channel through which execution failures surface.
    """

    copy_order_id: int
    follower_id: int
    leader_trade_id: int
    symbol: str
    side: str
    quantity: int
    status: str
    error: str | None = None


@dataclass(frozen=True)
class CopyOrderCancelledEvent(DomainEvent):
    """Event: follower cancelled a queued copy order."""

    copy_order_id: int
    follower_id: int
    leader_trade_id: int
    symbol: str


@dataclass(frozen=True)
class CopyOrderFilledEvent(DomainEvent):
    """Event: brokerage fill confirmed for a placed copy order."""

    copy_order_id: int
    follower_id: int
    symbol: str
    quantity: int


@dataclass(frozen=True)
class DelayedCopyScheduledEvent(DomainEvent):
    """Event: copy deferred until the next daily cutoff."""

    delayed_copy_order_id: int
    follower_id: int
    original_trade_id: int
    symbol: str
    quantity: int
    scheduled_for: datetime
