"""SQLAlchemy implementation of DelayedCopyOrderRepository."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from copy_engine.domain.copying.entities import DelayedCopyOrder
from copy_engine.domain.copying.exceptions import DuplicateCopyOrderError
from copy_engine.domain.copying.repositories import (
    DelayedCopyOrderRepository as DelayedCopyOrderRepositoryPort,
)
from copy_engine.domain.copying.value_objects import DelayedCopyStatus
from copy_engine.infrastructure.persistence.sqlalchemy.mappers import DelayedCopyOrderMapper
from copy_engine.infrastructure.persistence.sqlalchemy.models import DelayedCopyOrderModel


class SQLAlchemyDelayedCopyOrderRepository(DelayedCopyOrderRepositoryPort):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = DelayedCopyOrderMapper()

    async def save(self, order: DelayedCopyOrder) -> None:
        """INSERT or UPDATE.

        Raises:
            DuplicateCopyOrderError: Already scheduled for this trade and follower.
        """
        if order.id is None:
            model = self._mapper.to_model(order)
            self._session.add(model)
            try:
                await self._session.flush()
            except IntegrityError as e:
                raise DuplicateCopyOrderError(
                    "Delayed copy already scheduled for this leader trade",
                    original_trade_id=order.original_trade_id,
                    follower_id=order.follower_id,
                ) from e
            order.id = model.id
        else:
            existing = await self._session.get(DelayedCopyOrderModel, order.id)
            if existing is None:
                raise ValueError(f"Delayed copy order {order.id} not found for update")
            self._mapper.update_model_from_entity(existing, order)
            await self._session.flush()

    async def get_by_id(self, delayed_copy_order_id: int) -> Optional[DelayedCopyOrder]:
        model = await self._session.get(
            DelayedCopyOrderModel, delayed_copy_order_id, populate_existing=True
        )
        return self._mapper.to_entity(model) if model else None

    async def get_by_trade_and_follower(
        self, original_trade_id: int, follower_id: int
    ) -> Optional[DelayedCopyOrder]:
        stmt = select(DelayedCopyOrderModel).where(
            DelayedCopyOrderModel.original_trade_id == original_trade_id,
            DelayedCopyOrderModel.follower_id == follower_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._mapper.to_entity(model) if model else None

    async def get_due(self, now: datetime, limit: int | None = None) -> list[DelayedCopyOrder]:
        stmt = (
            select(DelayedCopyOrderModel)
            .where(DelayedCopyOrderModel.status == DelayedCopyStatus.PENDING.value)
            .where(DelayedCopyOrderModel.scheduled_for <= now)
            .order_by(DelayedCopyOrderModel.scheduled_for.asc(), DelayedCopyOrderModel.id.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]

    async def list_for_follower(
        self, follower_id: int, status: DelayedCopyStatus | None = None
    ) -> list[DelayedCopyOrder]:
        stmt = select(DelayedCopyOrderModel).where(
            DelayedCopyOrderModel.follower_id == follower_id
        )
        if status is not None:
            stmt = stmt.where(DelayedCopyOrderModel.status == status.value)
        stmt = stmt.order_by(DelayedCopyOrderModel.scheduled_for.desc())

        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]
