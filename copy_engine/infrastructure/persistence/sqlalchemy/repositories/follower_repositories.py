"""SQLAlchemy implementations of the follower configuration stores."""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from copy_engine.domain.copying.repositories import GuardrailRepository, SubscriptionRepository
from copy_engine.domain.copying.value_objects import FollowerSubscription, Guardrail
from copy_engine.infrastructure.persistence.sqlalchemy.mappers import (
    GuardrailMapper,
    SubscriptionMapper,
)
from copy_engine.infrastructure.persistence.sqlalchemy.models import (
    CopyGuardrailModel,
    CopySubscriptionModel,
)


class SQLAlchemySubscriptionRepository(SubscriptionRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = SubscriptionMapper()

    async def get_for_leader(self, leader_id: int) -> list[FollowerSubscription]:
        stmt = (
            select(CopySubscriptionModel)
            .where(CopySubscriptionModel.leader_id == leader_id)
            .order_by(CopySubscriptionModel.follower_id.asc())
        )
        result = await self._session.execute(stmt)
        return [self._mapper.to_value(model) for model in result.scalars().all()]

    async def get(self, leader_id: int, follower_id: int) -> Optional[FollowerSubscription]:
        stmt = select(CopySubscriptionModel).where(
            CopySubscriptionModel.leader_id == leader_id,
            CopySubscriptionModel.follower_id == follower_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._mapper.to_value(model) if model else None


class SQLAlchemyGuardrailRepository(GuardrailRepository):
    """Guardrails keyed by (follower, symbol); NULL symbol is the global rule.

    Replacement is delete + insert, since NULL symbols do not collide in
    a unique index on every backend.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = GuardrailMapper()

    async def get_for_follower(self, follower_id: int) -> list[Guardrail]:
        stmt = select(CopyGuardrailModel).where(CopyGuardrailModel.follower_id == follower_id)
        result = await self._session.execute(stmt)
        return [self._mapper.to_value(model) for model in result.scalars().all()]

    async def replace(self, guardrail: Guardrail) -> None:
        await self._delete(guardrail.follower_id, guardrail.symbol)
        self._session.add(self._mapper.to_model(guardrail))
        await self._session.flush()

    async def delete(self, follower_id: int, symbol: str | None) -> bool:
        removed = await self._delete(follower_id, symbol)
        return removed > 0

    async def _delete(self, follower_id: int, symbol: str | None) -> int:
        stmt = delete(CopyGuardrailModel).where(CopyGuardrailModel.follower_id == follower_id)
        if symbol is None:
            stmt = stmt.where(CopyGuardrailModel.symbol.is_(None))
        else:
            stmt = stmt.where(CopyGuardrailModel.symbol == symbol.upper())

        result = await self._session.execute(stmt)
        return result.rowcount or 0
