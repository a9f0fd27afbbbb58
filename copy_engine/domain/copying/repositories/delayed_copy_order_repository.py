"""DelayedCopyOrderRepository Port."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..entities import DelayedCopyOrder
from ..value_objects import DelayedCopyStatus


class DelayedCopyOrderRepository(ABC):
    """Abstract interface for the pending delayed copy queue."""

    @abstractmethod
    async def save(self, order: DelayedCopyOrder) -> None:
        pass

    @abstractmethod
    async def get_by_id(self, delayed_copy_order_id: int) -> Optional[DelayedCopyOrder]:
        pass

    @abstractmethod
    async def get_by_trade_and_follower(
        self, original_trade_id: int, follower_id: int
    ) -> Optional[DelayedCopyOrder]:
        pass

    @abstractmethod
    async def get_due(self, now: datetime, limit: int | None = None) -> list[DelayedCopyOrder]:
        """PENDING orders with ``scheduled_for <= now``, oldest first.

        Note:
            Rows are not locked. Two flushes picking the same order are
            resolved by the copy order idempotency lookup and the unique
            (leader_trade_id, follower_id) constraint.
        """
        pass

    @abstractmethod
    async def list_for_follower(
        self, follower_id: int, status: DelayedCopyStatus | None = None
    ) -> list[DelayedCopyOrder]:
        pass
