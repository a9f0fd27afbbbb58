"""SQLAlchemy implementations of the read-only account stores."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from copy_engine.domain.brokerage.repositories import BrokerConnectionRepository
from copy_engine.domain.brokerage.value_objects import BrokerConnection, ConnectionStatus
from copy_engine.domain.copying.repositories import PortfolioRepository, TradeHistoryRepository
from copy_engine.domain.copying.value_objects import LeaderTradeEvent, TradeFill
from copy_engine.infrastructure.persistence.sqlalchemy.mappers import (
    BrokerConnectionMapper,
    TradeFillMapper,
)
from copy_engine.infrastructure.persistence.sqlalchemy.models import (
    BrokerConnectionModel,
    HoldingModel,
    TradeModel,
    UserModel,
)


class SQLAlchemyTradeHistoryRepository(TradeHistoryRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = TradeFillMapper()

    async def find_leader_trade(self, event: LeaderTradeEvent) -> Optional[TradeFill]:
        """Match on user, connection, symbol, side, quantity and fill time."""
        stmt = (
            select(TradeModel)
            .where(TradeModel.user_id == event.leader_id)
            .where(TradeModel.broker_connection_id == event.broker_connection_id)
            .where(TradeModel.symbol == event.symbol)
            .where(TradeModel.side == event.side.value)
            .where(TradeModel.quantity == event.quantity)
            .where(TradeModel.filled_at == event.filled_at.astimezone(timezone.utc))
            .order_by(TradeModel.id.asc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._mapper.to_value(model) if model else None

    async def get_user_trades(
        self, user_id: int, since: datetime, symbol: str | None = None
    ) -> list[TradeFill]:
        stmt = (
            select(TradeModel)
            .where(TradeModel.user_id == user_id)
            .where(TradeModel.filled_at >= since.astimezone(timezone.utc))
        )
        if symbol is not None:
            stmt = stmt.where(TradeModel.symbol == symbol.upper())
        stmt = stmt.order_by(TradeModel.filled_at.asc(), TradeModel.id.asc())

        result = await self._session.execute(stmt)
        return [self._mapper.to_value(model) for model in result.scalars().all()]

    async def get_recent_symbol_trades(
        self, symbol: str, since: datetime, limit: int
    ) -> list[TradeFill]:
        stmt = (
            select(TradeModel)
            .where(TradeModel.symbol == symbol.upper())
            .where(TradeModel.filled_at >= since.astimezone(timezone.utc))
            .order_by(TradeModel.filled_at.desc(), TradeModel.id.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._mapper.to_value(model) for model in result.scalars().all()]


class SQLAlchemyPortfolioRepository(PortfolioRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def account_exists(self, user_id: int) -> bool:
        return await self._session.get(UserModel, user_id) is not None

    async def get_positions(self, user_id: int) -> dict[str, Decimal]:
        stmt = (
            select(HoldingModel.symbol, func.sum(HoldingModel.market_value))
            .where(HoldingModel.user_id == user_id)
            .group_by(HoldingModel.symbol)
        )
        result = await self._session.execute(stmt)

        positions: dict[str, Decimal] = {}
        for symbol, value in result.all():
            key = symbol.upper()
            positions[key] = positions.get(key, Decimal("0")) + Decimal(str(value or 0))
        return positions


class SQLAlchemyBrokerConnectionRepository(BrokerConnectionRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = BrokerConnectionMapper()

    async def get_active_for_user(self, user_id: int) -> Optional[BrokerConnection]:
        stmt = (
            select(BrokerConnectionModel)
            .where(BrokerConnectionModel.user_id == user_id)
            .where(BrokerConnectionModel.status == ConnectionStatus.ACTIVE.value)
            .order_by(BrokerConnectionModel.created_at.desc(), BrokerConnectionModel.id.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._mapper.to_value(model) if model else None
