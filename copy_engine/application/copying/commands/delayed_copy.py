"""Delayed copy commands - schedule and flush."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from copy_engine.application.shared import Command
from copy_engine.domain.copying.value_objects import TradeSide


@dataclass(frozen=True)
class ScheduleDelayedCopyCommand(Command):
    """Queue a copy for the next daily cutoff."""

    follower_id: int
    leader_id: int
    leader_trade_id: int
    account_number: str
    symbol: str
    side: TradeSide
    fill_price: Decimal
    allocation: Decimal
    follower_nav: Decimal


@dataclass(frozen=True)
class FlushDelayedCopyOrdersCommand(Command):
    """Execute every pending delayed copy that is due.

    Example:
        >>> await handler.handle(FlushDelayedCopyOrdersCommand())
    """

    now: datetime | None = None
    """Reference time; defaults to the current UTC time."""

    limit: int | None = None
    """Maximum orders per flush; None flushes all due orders."""
