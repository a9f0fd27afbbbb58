"""Copy order API routes - history, statistics, cancellation, fill confirmation."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Query, status

from copy_engine.application.copying.commands import (
    CancelCopyOrderCommand,
    ConfirmCopyOrderFillCommand,
)
from copy_engine.application.copying.queries import GetCopyOrdersQuery, GetCopyTradingStatsQuery
from copy_engine.domain.copying.value_objects import CopyOrderStatus
from copy_engine.presentation.api.dependencies import (
    CancelCopyOrderHandlerDep,
    ConfirmFillHandlerDep,
    CurrentUserId,
    GetCopyOrdersHandlerDep,
    GetCopyStatsHandlerDep,
)
from copy_engine.presentation.api.v1.schemas import (
    ConfirmFillRequest,
    CopyOrderResponse,
    CopyTradingStatsResponse,
    ErrorResponse,
    SymbolCount,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/copy-orders", tags=["Copy Orders"])


@router.get(
    "",
    response_model=list[CopyOrderResponse],
    summary="List the follower's copy orders",
)
async def list_copy_orders(
    user_id: CurrentUserId,
    handler: GetCopyOrdersHandlerDep,
    order_status: CopyOrderStatus | None = Query(default=None, alias="status"),
    symbol: str | None = Query(default=None, max_length=32),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> list[CopyOrderResponse]:
    orders = await handler.handle(
        GetCopyOrdersQuery(
            follower_id=user_id,
            status=order_status,
            symbol=symbol,
            limit=limit,
            offset=offset,
        )
    )
    return [CopyOrderResponse(**asdict(order)) for order in orders]


@router.get(
    "/stats",
    response_model=CopyTradingStatsResponse,
    summary="Copy trading statistics",
)
async def get_copy_stats(
    user_id: CurrentUserId,
    handler: GetCopyStatsHandlerDep,
) -> CopyTradingStatsResponse:
    stats = await handler.handle(GetCopyTradingStatsQuery(follower_id=user_id))
    data = asdict(stats)
    data["most_copied_symbols"] = [
        SymbolCount(symbol=symbol, count=count) for symbol, count in stats.most_copied_symbols
    ]
    return CopyTradingStatsResponse(**data)


@router.post(
    "/{copy_order_id}/cancel",
    response_model=CopyOrderResponse,
    summary="Cancel a queued copy order",
    description="""
    Cancel a copy order that has not been submitted to the brokerage yet.

    **Returns**:
    - 200: Order cancelled
    - 404: Order not found or owned by another follower
    - 409: Order is no longer queued
    """,
    responses={
        404: {"model": ErrorResponse, "description": "Copy order not found"},
        409: {"model": ErrorResponse, "description": "Copy order not cancellable"},
    },
)
async def cancel_copy_order(
    copy_order_id: int,
    user_id: CurrentUserId,
    handler: CancelCopyOrderHandlerDep,
) -> CopyOrderResponse:
    order = await handler.handle(
        CancelCopyOrderCommand(follower_id=user_id, copy_order_id=copy_order_id)
    )
    logger.info(
        "api.copy_order.cancelled",
        extra={"follower_id": user_id, "copy_order_id": copy_order_id},
    )
    return CopyOrderResponse(**asdict(order))


@router.post(
    "/{copy_order_id}/fill",
    response_model=CopyOrderResponse,
    status_code=status.HTTP_200_OK,
    summary="Confirm a fill (reconciler hook)",
    responses={
        404: {"model": ErrorResponse, "description": "Copy order not found"},
        409: {"model": ErrorResponse, "description": "Copy order not placed"},
    },
)
async def confirm_copy_order_fill(
    copy_order_id: int,
    request: ConfirmFillRequest,
    user_id: CurrentUserId,
    handler: ConfirmFillHandlerDep,
) -> CopyOrderResponse:
    order = await handler.handle(
        ConfirmCopyOrderFillCommand(copy_order_id=copy_order_id, filled_at=request.filled_at)
    )
    return CopyOrderResponse(**asdict(order))
