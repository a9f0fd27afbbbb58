"""Follower-facing copy order commands."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from copy_engine.application.shared import Command


@dataclass(frozen=True)
class CancelCopyOrderCommand(Command):
    """Cancel a queued copy order owned by the follower."""

    follower_id: int
    copy_order_id: int


@dataclass(frozen=True)
class ConfirmCopyOrderFillCommand(Command):
    """Mark a placed copy order as filled (external reconciler)."""

    copy_order_id: int
    filled_at: datetime | None = None


@dataclass(frozen=True)
class SetGuardrailCommand(Command):
    """Create or replace a guardrail.

    ``symbol=None`` configures the follower's global cap.
    """

    follower_id: int
    max_allocation_pct: Decimal
    symbol: str | None = None


@dataclass(frozen=True)
class RemoveGuardrailCommand(Command):
    follower_id: int
    symbol: str | None = None
