"""Copying queries (read operations)."""

from dataclasses import dataclass

from copy_engine.application.shared import Query
from copy_engine.domain.copying.value_objects import CopyOrderStatus, DelayedCopyStatus


@dataclass(frozen=True)
class GetCopyOrdersQuery(Query):
    """Follower's copy order history, newest first."""

    follower_id: int
    status: CopyOrderStatus | None = None
    symbol: str | None = None
    limit: int = 50
    offset: int = 0


@dataclass(frozen=True)
class GetCopyTradingStatsQuery(Query):
    follower_id: int


@dataclass(frozen=True)
class GetDelayedCopyOrdersQuery(Query):
    follower_id: int
    status: DelayedCopyStatus | None = None


@dataclass(frozen=True)
class GetGuardrailsQuery(Query):
    follower_id: int
