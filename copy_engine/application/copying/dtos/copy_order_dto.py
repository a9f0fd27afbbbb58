"""Copy order DTOs - data transfer objects for API responses and workers."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from copy_engine.domain.copying.entities import CopyOrder, DelayedCopyOrder
from copy_engine.domain.copying.value_objects import Guardrail


@dataclass
class CopyOrderDTO:
    """Copy order data transfer object. No business logic."""

    id: int
    leader_trade_id: int
    follower_id: int
    leader_id: int
    symbol: str
    side: str
    quantity: int
    status: str
    broker_order_id: str | None
    filled_at: datetime | None
    error_message: str | None
    created_at: datetime

    @classmethod
    def from_entity(cls, order: CopyOrder) -> "CopyOrderDTO":
        return cls(
            id=order.id or 0,
            leader_trade_id=order.leader_trade_id,
            follower_id=order.follower_id,
            leader_id=order.leader_id,
            symbol=order.symbol,
            side=order.side.value,
            quantity=order.quantity,
            status=order.status.value,
            broker_order_id=order.broker_order_id,
            filled_at=order.filled_at,
            error_message=order.error_message,
            created_at=order.created_at,
        )


@dataclass
class DelayedCopyOrderDTO:
    id: int
    original_trade_id: int
    follower_id: int
    leader_id: int
    symbol: str
    side: str
    quantity: int
    status: str
    scheduled_for: datetime
    copy_order_id: int | None
    executed_at: datetime | None
    error_message: str | None

    @classmethod
    def from_entity(cls, order: DelayedCopyOrder) -> "DelayedCopyOrderDTO":
        return cls(
            id=order.id or 0,
            original_trade_id=order.original_trade_id,
            follower_id=order.follower_id,
            leader_id=order.leader_id,
            symbol=order.symbol,
            side=order.side.value,
            quantity=order.quantity,
            status=order.status.value,
            scheduled_for=order.scheduled_for,
            copy_order_id=order.copy_order_id,
            executed_at=order.executed_at,
            error_message=order.error_message,
        )


@dataclass
class GuardrailDTO:
    follower_id: int
    symbol: str | None
    max_allocation_pct: Decimal

    @classmethod
    def from_value(cls, guardrail: Guardrail) -> "GuardrailDTO":
        return cls(
            follower_id=guardrail.follower_id,
            symbol=guardrail.symbol,
            max_allocation_pct=guardrail.max_allocation_pct,
        )


@dataclass
class CopyTradingStatsDTO:
    """Aggregated copy statistics for one follower."""

    follower_id: int
    total_orders: int
    queued_orders: int
    placed_orders: int
    filled_orders: int
    failed_orders: int
    cancelled_orders: int
    success_rate: Decimal
    """(placed + filled) / total, 0 when there are no orders."""

    most_copied_symbols: list[tuple[str, int]]
