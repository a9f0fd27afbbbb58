"""Leader trade intake - hands confirmed leader fills to the workers."""

import logging

from fastapi import APIRouter, status

from copy_engine.presentation.api.dependencies import LeaderTradeDispatcherDep
from copy_engine.presentation.api.v1.schemas import (
    ErrorResponse,
    LeaderTradeAcceptedResponse,
    LeaderTradeRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leader-trades", tags=["Leader Trades"])


@router.post(
    "",
    response_model=LeaderTradeAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Submit a leader fill for replication",
    description="""
    Queue a confirmed leader fill for replication to every eligible follower.

    Replication runs asynchronously on the `copy_trading` worker queue.
    Submitting the same fill twice is harmless: followers that already
    have a copy order for the leader trade are skipped.
    """,
    responses={422: {"model": ErrorResponse, "description": "Invalid event"}},
)
async def submit_leader_trade(
    request: LeaderTradeRequest,
    dispatch: LeaderTradeDispatcherDep,
) -> LeaderTradeAcceptedResponse:
    task_id = dispatch(request.to_task_payload())

    logger.info(
        "api.leader_trade.queued",
        extra={
            "task_id": task_id,
            "leader_id": request.leader_id,
            "symbol": request.symbol,
            "side": request.side,
            "quantity": request.quantity,
        },
    )
    return LeaderTradeAcceptedResponse(task_id=task_id)
