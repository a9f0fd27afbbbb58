"""Replication outcome DTOs.

Every follower pipeline ends in exactly one FollowerOutcome. Skips are not
errors: they are the silent abandon paths (lookup miss, sizing underflow,
risk denial).
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from .copy_order_dto import CopyOrderDTO, DelayedCopyOrderDTO


class FollowerOutcome(str, Enum):
    """How one follower's pipeline ended."""

    PLACED = "placed"
    FAILED = "failed"
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    SKIPPED_UNDERFLOW = "skipped_underflow"
    SKIPPED_NO_CONNECTION = "skipped_no_connection"
    SKIPPED_RISK = "skipped_risk"
    SKIPPED_UNKNOWN_FOLLOWER = "skipped_unknown_follower"
    ERROR = "error"

    @property
    def is_skip(self) -> bool:
        return self.value.startswith("skipped_")


@dataclass
class CopyAttemptDTO:
    """Result of the execution coordinator or the delayed scheduler."""

    outcome: FollowerOutcome
    quantity: int = 0
    copy_order: CopyOrderDTO | None = None
    delayed_copy_order: DelayedCopyOrderDTO | None = None
    reason: str | None = None


@dataclass
class FollowerResultDTO:
    follower_id: int
    outcome: FollowerOutcome
    strategy: str | None = None
    allocation: Decimal | None = None
    quantity: int = 0
    copy_order_id: int | None = None
    delayed_copy_order_id: int | None = None
    reason: str | None = None


@dataclass
class ReplicationResultDTO:
    """Fan-out summary for one leader trade."""

    leader_id: int
    symbol: str
    leader_trade_id: int | None
    followers: list[FollowerResultDTO] = field(default_factory=list)

    def count(self, outcome: FollowerOutcome) -> int:
        return sum(1 for f in self.followers if f.outcome == outcome)

    @property
    def placed_count(self) -> int:
        return self.count(FollowerOutcome.PLACED)

    @property
    def failed_count(self) -> int:
        return self.count(FollowerOutcome.FAILED) + self.count(FollowerOutcome.ERROR)

    @property
    def scheduled_count(self) -> int:
        return self.count(FollowerOutcome.SCHEDULED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for f in self.followers if f.outcome.is_skip)


@dataclass
class FlushResultDTO:
    """Delayed copy flush summary."""

    processed: int = 0
    executed: int = 0
    failed: int = 0
    delayed_copy_order_ids: list[int] = field(default_factory=list)
