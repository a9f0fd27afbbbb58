"""CopyOrder Aggregate Root - replica of a leader trade for one follower.

The order follows the same two-phase flow as any brokerage call:
1. Phase 1: persist the order as QUEUED and commit
2. Brokerage call
3. Phase 2: move to PLACED or FAILED and commit, then publish the outcome
"""

from datetime import datetime, timezone
from typing import Optional

from copy_engine.domain.shared import AggregateRoot

from ..events import CopyExecutedEvent, CopyOrderCancelledEvent, CopyOrderFilledEvent
from ..exceptions import InvalidCopyOrderStateError, InvalidCopyQuantityError
from ..value_objects import CopyOrderStatus, TradeSide


class CopyOrder(AggregateRoot):
    """CopyOrder Aggregate Root.

    Rules:
    - Created in QUEUED with a whole quantity of at least 1
    - At most one order per (leader_trade_id, follower_id)
    - QUEUED → PLACED | FAILED | CANCELLED, PLACED → FILLED
    - FILLED, FAILED and CANCELLED are terminal, except CANCELLED → PLACED
      when the brokerage accepted the order before the cancel was seen

    Example:
        >>> order = CopyOrder.create_queued(
        ...     leader_trade_id=42,
        ...     follower_id=7,
        ...     leader_id=1,
        ...     symbol="AAPL",
        ...     side=TradeSide.BUY,
        ...     quantity=4,
        ... )
        >>> await uow.copy_orders.save(order)
        >>> await uow.commit()  # Phase 1
        >>> receipt = await brokerage.place_order(...)
        >>> order.mark_placed(receipt.order_id)  # Phase 2
    """

    def __init__(
        self,
        leader_trade_id: int,
        follower_id: int,
        leader_id: int,
        symbol: str,
        side: TradeSide,
        quantity: int,
        status: CopyOrderStatus = CopyOrderStatus.QUEUED,
        broker_order_id: Optional[str] = None,
        filled_at: Optional[datetime] = None,
        error_message: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        id: Optional[int] = None,
    ) -> None:
        super().__init__(id)

        self._validate_quantity(quantity)

        self.leader_trade_id = leader_trade_id
        self.follower_id = follower_id
        self.leader_id = leader_id
        self.symbol = symbol
        self.side = side
        self.quantity = quantity

        self.status = status
        self.broker_order_id = broker_order_id
        self.filled_at = filled_at
        self.error_message = error_message

        now = datetime.now(timezone.utc)
        self.created_at = created_at or now
        self.updated_at = updated_at or self.created_at

    @classmethod
    def create_queued(
        cls,
        leader_trade_id: int,
        follower_id: int,
        leader_id: int,
        symbol: str,
        side: TradeSide,
        quantity: int,
    ) -> "CopyOrder":
        """Factory for a new order awaiting submission.

        Raises:
            InvalidCopyQuantityError: If quantity is below 1.
        """
        return cls(
            leader_trade_id=leader_trade_id,
            follower_id=follower_id,
            leader_id=leader_id,
            symbol=symbol.upper(),
            side=side,
            quantity=quantity,
        )

    def mark_placed(self, broker_order_id: str | None = None) -> None:
        """Brokerage accepted the order (Phase 2: CONFIRM).

        Raises:
            InvalidCopyOrderStateError: If the order is not QUEUED.
        """
        self._ensure_status(CopyOrderStatus.QUEUED, CopyOrderStatus.PLACED)

        self.status = CopyOrderStatus.PLACED
        self.broker_order_id = broker_order_id
        self.filled_at = datetime.now(timezone.utc)
        self._touch()

        self.add_domain_event(
            CopyExecutedEvent(
                copy_order_id=self.id or 0,
                follower_id=self.follower_id,
                leader_trade_id=self.leader_trade_id,
                symbol=self.symbol,
                side=self.side.value,
                quantity=self.quantity,
                status="placed",
            )
        )

    def record_late_placement(self, broker_order_id: str) -> None:
        """The brokerage accepted an order that was cancelled meanwhile.

        The order is live at the brokerage, so the record follows it back
        to PLACED.

        Raises:
            InvalidCopyOrderStateError: If the order is not CANCELLED.
        """
        self._ensure_status(CopyOrderStatus.CANCELLED, CopyOrderStatus.PLACED)
        self.status = CopyOrderStatus.QUEUED
        self.mark_placed(broker_order_id)

    def fail(self, error_message: str) -> None:
        """Brokerage call failed (Phase 2: ROLLBACK).

        ``filled_at`` stays empty on failed orders.

        Raises:
            InvalidCopyOrderStateError: If the order is not QUEUED.
        """
        self._ensure_status(CopyOrderStatus.QUEUED, CopyOrderStatus.FAILED)

        self.status = CopyOrderStatus.FAILED
        self.error_message = error_message or "Unknown brokerage error"
        self._touch()

        self.add_domain_event(
            CopyExecutedEvent(
                copy_order_id=self.id or 0,
                follower_id=self.follower_id,
                leader_trade_id=self.leader_trade_id,
                symbol=self.symbol,
                side=self.side.value,
                quantity=self.quantity,
                status="failed",
                error=self.error_message,
            )
        )

    def cancel(self) -> None:
        """Follower cancelled the order before submission.

        Raises:
            InvalidCopyOrderStateError: If the order already left QUEUED.
        """
        self._ensure_status(CopyOrderStatus.QUEUED, CopyOrderStatus.CANCELLED)

        self.status = CopyOrderStatus.CANCELLED
        self._touch()

        self.add_domain_event(
            CopyOrderCancelledEvent(
                copy_order_id=self.id or 0,
                follower_id=self.follower_id,
                leader_trade_id=self.leader_trade_id,
                symbol=self.symbol,
            )
        )

    def confirm_fill(self, filled_at: datetime | None = None) -> None:
        """External reconciler confirmed the brokerage fill.

        Raises:
            InvalidCopyOrderStateError: If the order is not PLACED.
        """
        self._ensure_status(CopyOrderStatus.PLACED, CopyOrderStatus.FILLED)

        self.status = CopyOrderStatus.FILLED
        if filled_at is not None:
            self.filled_at = filled_at
        self._touch()

        self.add_domain_event(
            CopyOrderFilledEvent(
                copy_order_id=self.id or 0,
                follower_id=self.follower_id,
                symbol=self.symbol,
                quantity=self.quantity,
            )
        )

    # ==================== Queries ====================

    @property
    def is_queued(self) -> bool:
        return self.status == CopyOrderStatus.QUEUED

    @property
    def is_placed(self) -> bool:
        return self.status == CopyOrderStatus.PLACED

    @property
    def is_failed(self) -> bool:
        return self.status == CopyOrderStatus.FAILED

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    # ==================== Internals ====================

    def _ensure_status(
        self, expected: CopyOrderStatus, target: CopyOrderStatus
    ) -> None:
        if self.status != expected:
            raise InvalidCopyOrderStateError(
                f"Cannot move copy order to {target.value}",
                copy_order_id=self.id,
                current_status=self.status.value,
                expected_status=expected.value,
            )

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    @staticmethod
    def _validate_quantity(quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise InvalidCopyQuantityError(
                "Copy order quantity must be a whole number of at least 1",
                quantity=quantity,
            )

    def __repr__(self) -> str:
        return (
            f"CopyOrder(id={self.id}, follower_id={self.follower_id}, "
            f"symbol={self.symbol}, quantity={self.quantity}, status={self.status.value})"
        )
