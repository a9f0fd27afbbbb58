"""Copy order read handlers."""

from decimal import Decimal

from copy_engine.application.copying.dtos import (
    CopyOrderDTO,
    CopyTradingStatsDTO,
    DelayedCopyOrderDTO,
)
from copy_engine.application.copying.queries import (
    GetCopyOrdersQuery,
    GetCopyTradingStatsQuery,
    GetDelayedCopyOrdersQuery,
)
from copy_engine.application.shared import QueryHandler, UnitOfWork
from copy_engine.domain.copying.value_objects import CopyOrderStatus

TOP_SYMBOLS_LIMIT = 5


class GetCopyOrdersHandler(QueryHandler[GetCopyOrdersQuery, list[CopyOrderDTO]]):
    """Follower's copy order history, newest first."""

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def handle(self, query: GetCopyOrdersQuery) -> list[CopyOrderDTO]:
        async with self._uow:
            orders = await self._uow.copy_orders.list_for_follower(
                query.follower_id,
                status=query.status,
                symbol=query.symbol.upper() if query.symbol else None,
                limit=query.limit,
                offset=query.offset,
            )
        return [CopyOrderDTO.from_entity(order) for order in orders]


class GetCopyTradingStatsHandler(QueryHandler[GetCopyTradingStatsQuery, CopyTradingStatsDTO]):
    """Order counts per status, success rate and most copied symbols.

    Success rate counts PLACED and FILLED orders as successful.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def handle(self, query: GetCopyTradingStatsQuery) -> CopyTradingStatsDTO:
        async with self._uow:
            counts = await self._uow.copy_orders.count_by_status(query.follower_id)
            top_symbols = await self._uow.copy_orders.most_copied_symbols(
                query.follower_id, limit=TOP_SYMBOLS_LIMIT
            )

        total = sum(counts.values())
        placed = counts.get(CopyOrderStatus.PLACED, 0)
        filled = counts.get(CopyOrderStatus.FILLED, 0)
        success_rate = (
            Decimal(placed + filled) / Decimal(total) if total else Decimal("0")
        )

        return CopyTradingStatsDTO(
            follower_id=query.follower_id,
            total_orders=total,
            queued_orders=counts.get(CopyOrderStatus.QUEUED, 0),
            placed_orders=placed,
            filled_orders=filled,
            failed_orders=counts.get(CopyOrderStatus.FAILED, 0),
            cancelled_orders=counts.get(CopyOrderStatus.CANCELLED, 0),
            success_rate=success_rate,
            most_copied_symbols=top_symbols,
        )


class GetDelayedCopyOrdersHandler(
    QueryHandler[GetDelayedCopyOrdersQuery, list[DelayedCopyOrderDTO]]
):
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def handle(self, query: GetDelayedCopyOrdersQuery) -> list[DelayedCopyOrderDTO]:
        async with self._uow:
            orders = await self._uow.delayed_copy_orders.list_for_follower(
                query.follower_id, status=query.status
            )
        return [DelayedCopyOrderDTO.from_entity(order) for order in orders]
