"""DelayedCopyOrder Aggregate Root - a copy deferred to the daily cutoff."""

from datetime import datetime, timezone
from typing import Optional

from copy_engine.domain.shared import AggregateRoot

from ..events import DelayedCopyScheduledEvent
from ..exceptions import InvalidCopyQuantityError, InvalidDelayedCopyStateError
from ..value_objects import DelayedCopyStatus, TradeSide


class DelayedCopyOrder(AggregateRoot):
    """Pending copy order that executes in the end-of-day batch.

    Rules:
    - Created PENDING with a whole quantity of at least 1
    - At most one per (original_trade_id, follower_id)
    - PENDING → EXECUTED | FAILED, both terminal
    """

    def __init__(
        self,
        original_trade_id: int,
        follower_id: int,
        leader_id: int,
        account_number: str,
        symbol: str,
        side: TradeSide,
        quantity: int,
        scheduled_for: datetime,
        status: DelayedCopyStatus = DelayedCopyStatus.PENDING,
        copy_order_id: Optional[int] = None,
        executed_at: Optional[datetime] = None,
        error_message: Optional[str] = None,
        created_at: Optional[datetime] = None,
        id: Optional[int] = None,
    ) -> None:
        super().__init__(id)

        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidCopyQuantityError(
                "Delayed copy quantity must be a whole number of at least 1",
                quantity=quantity,
            )

        self.original_trade_id = original_trade_id
        self.follower_id = follower_id
        self.leader_id = leader_id
        self.account_number = account_number
        self.symbol = symbol
        self.side = side
        self.quantity = quantity
        self.scheduled_for = scheduled_for

        self.status = status
        self.copy_order_id = copy_order_id
        self.executed_at = executed_at
        self.error_message = error_message
        self.created_at = created_at or datetime.now(timezone.utc)

    @classmethod
    def schedule(
        cls,
        original_trade_id: int,
        follower_id: int,
        leader_id: int,
        account_number: str,
        symbol: str,
        side: TradeSide,
        quantity: int,
        scheduled_for: datetime,
    ) -> "DelayedCopyOrder":
        """Factory for a new pending order."""
        return cls(
            original_trade_id=original_trade_id,
            follower_id=follower_id,
            leader_id=leader_id,
            account_number=account_number,
            symbol=symbol.upper(),
            side=side,
            quantity=quantity,
            scheduled_for=scheduled_for,
        )

    def record_scheduled(self) -> None:
        """Emit DelayedCopyScheduledEvent once the order has an ID."""
        self.add_domain_event(
            DelayedCopyScheduledEvent(
                delayed_copy_order_id=self.id or 0,
                follower_id=self.follower_id,
                original_trade_id=self.original_trade_id,
                symbol=self.symbol,
                quantity=self.quantity,
                scheduled_for=self.scheduled_for,
            )
        )

    def is_due(self, now: datetime) -> bool:
        return self.status == DelayedCopyStatus.PENDING and self.scheduled_for <= now

    def mark_executed(self, copy_order_id: int | None) -> None:
        """Flush placed the order with the brokerage."""
        self._ensure_pending(DelayedCopyStatus.EXECUTED)
        self.status = DelayedCopyStatus.EXECUTED
        self.copy_order_id = copy_order_id
        self.executed_at = datetime.now(timezone.utc)

    def mark_failed(self, error_message: str, copy_order_id: int | None = None) -> None:
        """Flush could not place the order."""
        self._ensure_pending(DelayedCopyStatus.FAILED)
        self.status = DelayedCopyStatus.FAILED
        self.copy_order_id = copy_order_id
        self.error_message = error_message
        self.executed_at = datetime.now(timezone.utc)

    @property
    def is_pending(self) -> bool:
        return self.status == DelayedCopyStatus.PENDING

    def _ensure_pending(self, target: DelayedCopyStatus) -> None:
        if self.status != DelayedCopyStatus.PENDING:
            raise InvalidDelayedCopyStateError(
                f"Cannot move delayed copy order to {target.value}",
                delayed_copy_order_id=self.id,
                current_status=self.status.value,
            )
