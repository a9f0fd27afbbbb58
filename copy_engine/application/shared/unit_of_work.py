"""Unit of Work pattern - manages transactions.

The Unit of Work gives a use case:
- Atomic operations (all or nothing)
- A transaction boundary
- Repositories that share one session
"""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Callable, Optional, Type

from copy_engine.domain.brokerage.repositories import BrokerConnectionRepository
from copy_engine.domain.copying.repositories import (
    CopyOrderRepository,
    DelayedCopyOrderRepository,
    GuardrailRepository,
    PortfolioRepository,
    SubscriptionRepository,
    TradeHistoryRepository,
)


class UnitOfWork(ABC):
    """Abstract Unit of Work interface.

    Example:
        >>> async with uow:
        ...     order = await uow.copy_orders.get_by_id(42)
        ...     order.cancel()
        ...     await uow.copy_orders.save(order)
        ...     await uow.commit()

    Note:
        A Unit of Work wraps a single database session, so it must not be
        shared between concurrently running follower pipelines. Use a
        UnitOfWorkFactory and open one per pipeline.
    """

    @abstractmethod
    async def __aenter__(self) -> "UnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Exit the context; rolls back when exc_type is not None."""
        pass

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass

    # ==================== Repositories ====================

    @property
    @abstractmethod
    def copy_orders(self) -> CopyOrderRepository:
        pass

    @property
    @abstractmethod
    def delayed_copy_orders(self) -> DelayedCopyOrderRepository:
        pass

    @property
    @abstractmethod
    def guardrails(self) -> GuardrailRepository:
        pass

    @property
    @abstractmethod
    def subscriptions(self) -> SubscriptionRepository:
        pass

    @property
    @abstractmethod
    def trade_history(self) -> TradeHistoryRepository:
        pass

    @property
    @abstractmethod
    def portfolios(self) -> PortfolioRepository:
        pass

    @property
    @abstractmethod
    def broker_connections(self) -> BrokerConnectionRepository:
        pass


# Opens a fresh Unit of Work (one session) per call
UnitOfWorkFactory = Callable[[], UnitOfWork]
