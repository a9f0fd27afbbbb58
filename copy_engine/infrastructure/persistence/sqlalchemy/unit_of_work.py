"""SQLAlchemy Unit of Work implementation."""

import logging
from types import TracebackType
from typing import Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from copy_engine.application.shared import UnitOfWork, UnitOfWorkFactory
from copy_engine.domain.brokerage.repositories import BrokerConnectionRepository
from copy_engine.domain.copying.repositories import (
    CopyOrderRepository,
    DelayedCopyOrderRepository,
    GuardrailRepository,
    PortfolioRepository,
    SubscriptionRepository,
    TradeHistoryRepository,
)
from copy_engine.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyBrokerConnectionRepository,
    SQLAlchemyCopyOrderRepository,
    SQLAlchemyDelayedCopyOrderRepository,
    SQLAlchemyGuardrailRepository,
    SQLAlchemyPortfolioRepository,
    SQLAlchemySubscriptionRepository,
    SQLAlchemyTradeHistoryRepository,
)

logger = logging.getLogger(__name__)


class SQLAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of Unit of Work pattern.

    Responsibilities:
    - Owning one AsyncSession per ``async with`` block
    - Transaction management (commit/rollback)
    - Automatic rollback on exceptions
    - Lazy initialization of repositories

    Example:
        >>> session_factory = async_sessionmaker(engine, expire_on_commit=False)
        >>> uow = SQLAlchemyUnitOfWork(session_factory)
        >>>
        >>> async with uow:
        ...     order = CopyOrder.create_queued(...)
        ...     await uow.copy_orders.save(order)
        ...     await uow.commit()

    The instance can be entered again after it exits; each block gets a
    fresh session. It must not be entered by two coroutines at once.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._reset_repositories()

    def _reset_repositories(self) -> None:
        self._copy_orders: Optional[CopyOrderRepository] = None
        self._delayed_copy_orders: Optional[DelayedCopyOrderRepository] = None
        self._guardrails: Optional[GuardrailRepository] = None
        self._subscriptions: Optional[SubscriptionRepository] = None
        self._trade_history: Optional[TradeHistoryRepository] = None
        self._portfolios: Optional[PortfolioRepository] = None
        self._broker_connections: Optional[BrokerConnectionRepository] = None

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        # SQLAlchemy 2.0 sessions auto-begin on first statement
        self._session = self._session_factory()
        logger.debug("unit_of_work.started")
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        try:
            if exc_type is not None:
                await self.rollback()
                logger.warning(
                    "unit_of_work.rolled_back",
                    extra={"exception_type": exc_type.__name__},
                )
        finally:
            if self._session:
                await self._session.close()
                self._session = None
                self._reset_repositories()

            logger.debug("unit_of_work.closed")

    async def commit(self) -> None:
        """Commit transaction.

        Raises:
            Exception: If commit failed (DB error, constraint violation, etc.).
        """
        session = self._require_session()

        try:
            await session.commit()
            logger.debug("unit_of_work.committed")
        except Exception as e:
            logger.error("unit_of_work.commit_failed", extra={"error": str(e)})
            await self.rollback()
            raise

    async def rollback(self) -> None:
        session = self._require_session()
        await session.rollback()
        logger.debug("unit_of_work.rolled_back")

    def _require_session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Unit of Work not started (use async with)")
        return self._session

    # ==================== Repositories ====================

    @property
    def copy_orders(self) -> CopyOrderRepository:
        session = self._require_session()
        if self._copy_orders is None:
            self._copy_orders = SQLAlchemyCopyOrderRepository(session)
        return self._copy_orders

    @property
    def delayed_copy_orders(self) -> DelayedCopyOrderRepository:
        session = self._require_session()
        if self._delayed_copy_orders is None:
            self._delayed_copy_orders = SQLAlchemyDelayedCopyOrderRepository(session)
        return self._delayed_copy_orders

    @property
    def guardrails(self) -> GuardrailRepository:
        session = self._require_session()
        if self._guardrails is None:
            self._guardrails = SQLAlchemyGuardrailRepository(session)
        return self._guardrails

    @property
    def subscriptions(self) -> SubscriptionRepository:
        session = self._require_session()
        if self._subscriptions is None:
            self._subscriptions = SQLAlchemySubscriptionRepository(session)
        return self._subscriptions

    @property
    def trade_history(self) -> TradeHistoryRepository:
        session = self._require_session()
        if self._trade_history is None:
            self._trade_history = SQLAlchemyTradeHistoryRepository(session)
        return self._trade_history

    @property
    def portfolios(self) -> PortfolioRepository:
        session = self._require_session()
        if self._portfolios is None:
            self._portfolios = SQLAlchemyPortfolioRepository(session)
        return self._portfolios

    @property
    def broker_connections(self) -> BrokerConnectionRepository:
        """Read-only: connections are managed by the onboarding flow."""
        session = self._require_session()
        if self._broker_connections is None:
            self._broker_connections = SQLAlchemyBrokerConnectionRepository(session)
        return self._broker_connections


def create_unit_of_work(
    session_factory: async_sessionmaker[AsyncSession],
) -> SQLAlchemyUnitOfWork:
    """Factory for dependency injection.

    Example:
        >>> engine = create_async_engine("postgresql+asyncpg://...")
        >>> session_factory = async_sessionmaker(engine, expire_on_commit=False)
        >>> uow = create_unit_of_work(session_factory)
    """
    return SQLAlchemyUnitOfWork(session_factory)


def unit_of_work_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> UnitOfWorkFactory:
    """Build a factory that opens an independent Unit of Work per call.

    Fan-out handlers call it once per follower pipeline, so concurrent
    pipelines never share a session.
    """

    def factory() -> UnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory
