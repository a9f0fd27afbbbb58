"""SQLAlchemy implementation of CopyOrderRepository."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from copy_engine.domain.copying.entities import CopyOrder
from copy_engine.domain.copying.exceptions import CopyOrderNotFoundError, DuplicateCopyOrderError
from copy_engine.domain.copying.repositories import CopyOrderRepository as CopyOrderRepositoryPort
from copy_engine.domain.copying.value_objects import CopyOrderStatus
from copy_engine.infrastructure.persistence.sqlalchemy.mappers import CopyOrderMapper
from copy_engine.infrastructure.persistence.sqlalchemy.models import CopyOrderModel


class SQLAlchemyCopyOrderRepository(CopyOrderRepositoryPort):
    """SQLAlchemy implementation of CopyOrderRepository port.

    Example:
        >>> async with session_factory() as session:
        ...     repo = SQLAlchemyCopyOrderRepository(session)
        ...     order = await repo.get_by_id(42)
        ...     order.cancel()
        ...     await repo.save(order)
        ...     await session.commit()
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = CopyOrderMapper()

    async def save(self, order: CopyOrder) -> None:
        """INSERT when ``order.id is None``, otherwise UPDATE.

        Raises:
            DuplicateCopyOrderError: The (leader_trade_id, follower_id) pair
                already has an order.
            CopyOrderNotFoundError: UPDATE of a row that does not exist.
        """
        if order.id is None:
            model = self._mapper.to_model(order)
            self._session.add(model)
            try:
                await self._session.flush()
            except IntegrityError as e:
                raise DuplicateCopyOrderError(
                    "Copy order already exists for this leader trade",
                    leader_trade_id=order.leader_trade_id,
                    follower_id=order.follower_id,
                ) from e
            order.id = model.id
        else:
            existing = await self._session.get(CopyOrderModel, order.id)
            if existing is None:
                raise CopyOrderNotFoundError(
                    f"Copy order {order.id} not found for update", copy_order_id=order.id
                )
            self._mapper.update_model_from_entity(existing, order)
            await self._session.flush()

    async def get_by_id(self, copy_order_id: int) -> Optional[CopyOrder]:
        model = await self._session.get(CopyOrderModel, copy_order_id, populate_existing=True)
        if model is None:
            return None
        return self._mapper.to_entity(model)

    async def get_by_leader_trade_and_follower(
        self, leader_trade_id: int, follower_id: int
    ) -> Optional[CopyOrder]:
        stmt = select(CopyOrderModel).where(
            CopyOrderModel.leader_trade_id == leader_trade_id,
            CopyOrderModel.follower_id == follower_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._mapper.to_entity(model) if model else None

    async def list_for_follower(
        self,
        follower_id: int,
        status: CopyOrderStatus | None = None,
        symbol: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[CopyOrder]:
        stmt = select(CopyOrderModel).where(CopyOrderModel.follower_id == follower_id)
        if status is not None:
            stmt = stmt.where(CopyOrderModel.status == status.value)
        if symbol is not None:
            stmt = stmt.where(CopyOrderModel.symbol == symbol.upper())

        stmt = (
            stmt.order_by(CopyOrderModel.created_at.desc(), CopyOrderModel.id.desc())
            .limit(limit)
            .offset(offset)
        )

        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]

    async def count_for_follower(self, follower_id: int) -> int:
        stmt = select(func.count(CopyOrderModel.id)).where(
            CopyOrderModel.follower_id == follower_id
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def count_by_status(self, follower_id: int) -> dict[CopyOrderStatus, int]:
        stmt = (
            select(CopyOrderModel.status, func.count(CopyOrderModel.id))
            .where(CopyOrderModel.follower_id == follower_id)
            .group_by(CopyOrderModel.status)
        )
        result = await self._session.execute(stmt)
        return {CopyOrderStatus(status): count for status, count in result.all()}

    async def most_copied_symbols(
        self, follower_id: int, limit: int = 5
    ) -> list[tuple[str, int]]:
        order_count = func.count(CopyOrderModel.id).label("order_count")
        stmt = (
            select(CopyOrderModel.symbol, order_count)
            .where(CopyOrderModel.follower_id == follower_id)
            .group_by(CopyOrderModel.symbol)
            .order_by(order_count.desc(), CopyOrderModel.symbol.asc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [(symbol, count) for symbol, count in result.all()]
