"""Enums for the Copying bounded context."""

from enum import Enum


class TradeSide(str, Enum):
    """Trade direction as reported by the brokerage."""

    BUY = "BUY"
    SELL = "SELL"


class CopyOrderStatus(str, Enum):
    """Copy order lifecycle status.

    State machine:
        QUEUED → PLACED → FILLED
        QUEUED → FAILED
        QUEUED → CANCELLED (follower action before submission)
    """

    QUEUED = "queued"
    """Order persisted, not yet submitted to the brokerage."""

    PLACED = "placed"
    """Brokerage accepted the order."""

    FILLED = "filled"
    """Fill confirmed by the external reconciler."""

    FAILED = "failed"
    """Brokerage rejected the order or retries were exhausted."""

    CANCELLED = "cancelled"
    """Follower cancelled the order while it was still queued."""

    @property
    def is_terminal(self) -> bool:
        return self in (
            CopyOrderStatus.FILLED,
            CopyOrderStatus.FAILED,
            CopyOrderStatus.CANCELLED,
        )


class DelayedCopyStatus(str, Enum):
    """Delayed copy order status.

    State machine:
        PENDING → EXECUTED
        PENDING → FAILED
    """

    PENDING = "pending"
    """Waiting for the next daily cutoff."""

    EXECUTED = "executed"
    """Flushed and placed with the brokerage."""

    FAILED = "failed"
    """Flush could not place the order. Never retried."""


class PositionSizingStrategy(str, Enum):
    """Position sizing strategy, chosen by follower experience tier."""

    PERCENTAGE = "percentage"
    """Leader's own allocation, scaled down and capped."""

    MOMENTUM = "momentum"
    """Allocation driven by recent price momentum in the symbol."""

    RISK_PARITY = "risk_parity"
    """Equal risk contribution across existing positions."""

    KELLY = "kelly"
    """Kelly criterion over the leader's round trips in the symbol."""
