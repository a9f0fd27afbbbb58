"""CopyOrderRepository Port - persistence interface for copy orders.

The domain defines the port; infrastructure implements it with SQLAlchemy.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..entities import CopyOrder
from ..value_objects import CopyOrderStatus


class CopyOrderRepository(ABC):
    """Abstract interface for copy order persistence.

    Example:
        >>> existing = await uow.copy_orders.get_by_leader_trade_and_follower(42, 7)
        >>> if existing is None:
        ...     order = CopyOrder.create_queued(...)
        ...     await uow.copy_orders.save(order)
    """

    @abstractmethod
    async def save(self, order: CopyOrder) -> None:
        """Insert a new order (``id is None``) or update an existing one.

        Note:
            The store enforces one order per (leader_trade_id, follower_id).
        """
        pass

    @abstractmethod
    async def get_by_id(self, copy_order_id: int) -> Optional[CopyOrder]:
        pass

    @abstractmethod
    async def get_by_leader_trade_and_follower(
        self, leader_trade_id: int, follower_id: int
    ) -> Optional[CopyOrder]:
        """Idempotency lookup for one leader trade and one follower."""
        pass

    @abstractmethod
    async def list_for_follower(
        self,
        follower_id: int,
        status: CopyOrderStatus | None = None,
        symbol: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[CopyOrder]:
        """Follower's order history, newest first."""
        pass

    @abstractmethod
    async def count_for_follower(self, follower_id: int) -> int:
        """Total orders ever created for the follower (experience tier)."""
        pass

    @abstractmethod
    async def count_by_status(self, follower_id: int) -> dict[CopyOrderStatus, int]:
        pass

    @abstractmethod
    async def most_copied_symbols(
        self, follower_id: int, limit: int = 5
    ) -> list[tuple[str, int]]:
        """(symbol, order count) pairs, most copied first."""
        pass
