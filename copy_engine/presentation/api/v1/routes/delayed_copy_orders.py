"""Delayed copy order API routes."""

from dataclasses import asdict

from fastapi import APIRouter, Query

from copy_engine.application.copying.queries import GetDelayedCopyOrdersQuery
from copy_engine.domain.copying.value_objects import DelayedCopyStatus
from copy_engine.presentation.api.dependencies import (
    CurrentUserId,
    GetDelayedCopyOrdersHandlerDep,
)
from copy_engine.presentation.api.v1.schemas import DelayedCopyOrderResponse

router = APIRouter(prefix="/delayed-copy-orders", tags=["Delayed Copy Orders"])


@router.get(
    "",
    response_model=list[DelayedCopyOrderResponse],
    summary="List the follower's delayed copy orders",
)
async def list_delayed_copy_orders(
    user_id: CurrentUserId,
    handler: GetDelayedCopyOrdersHandlerDep,
    order_status: DelayedCopyStatus | None = Query(default=None, alias="status"),
) -> list[DelayedCopyOrderResponse]:
    orders = await handler.handle(
        GetDelayedCopyOrdersQuery(follower_id=user_id, status=order_status)
    )
    return [DelayedCopyOrderResponse(**asdict(order)) for order in orders]
