"""Guardrail API routes."""

from dataclasses import asdict

from fastapi import APIRouter, Query, Response, status

from copy_engine.application.copying.commands import RemoveGuardrailCommand, SetGuardrailCommand
from copy_engine.application.copying.queries import GetGuardrailsQuery
from copy_engine.presentation.api.dependencies import (
    CurrentUserId,
    GetGuardrailsHandlerDep,
    RemoveGuardrailHandlerDep,
    SetGuardrailHandlerDep,
)
from copy_engine.presentation.api.v1.schemas import (
    ErrorResponse,
    GuardrailRequest,
    GuardrailResponse,
)

router = APIRouter(prefix="/guardrails", tags=["Guardrails"])


@router.get("", response_model=list[GuardrailResponse], summary="List guardrails")
async def list_guardrails(
    user_id: CurrentUserId,
    handler: GetGuardrailsHandlerDep,
) -> list[GuardrailResponse]:
    guardrails = await handler.handle(GetGuardrailsQuery(follower_id=user_id))
    return [GuardrailResponse(**asdict(g)) for g in guardrails]


@router.put(
    "",
    response_model=GuardrailResponse,
    summary="Create or replace a guardrail",
    description="""
    Cap the share of NAV any single copy may allocate. A symbol-specific
    rule and the global rule (no symbol) apply together; the lower wins.

    **Returns**:
    - 200: Guardrail stored
    - 422: Percentage outside (0, 1]
    """,
    responses={422: {"model": ErrorResponse, "description": "Invalid percentage"}},
)
async def set_guardrail(
    request: GuardrailRequest,
    user_id: CurrentUserId,
    handler: SetGuardrailHandlerDep,
) -> GuardrailResponse:
    guardrail = await handler.handle(
        SetGuardrailCommand(
            follower_id=user_id,
            symbol=request.symbol,
            max_allocation_pct=request.max_allocation_pct,
        )
    )
    return GuardrailResponse(**asdict(guardrail))


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a guardrail",
    responses={404: {"model": ErrorResponse, "description": "Guardrail not found"}},
)
async def remove_guardrail(
    user_id: CurrentUserId,
    handler: RemoveGuardrailHandlerDep,
    symbol: str | None = Query(default=None, max_length=32),
) -> Response:
    await handler.handle(RemoveGuardrailCommand(follower_id=user_id, symbol=symbol))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
