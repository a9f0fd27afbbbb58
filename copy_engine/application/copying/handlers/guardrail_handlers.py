"""Guardrail configuration handlers."""

import logging

from copy_engine.application.copying.commands import RemoveGuardrailCommand, SetGuardrailCommand
from copy_engine.application.copying.dtos import GuardrailDTO
from copy_engine.application.copying.queries import GetGuardrailsQuery
from copy_engine.application.shared import CommandHandler, QueryHandler, UnitOfWork
from copy_engine.domain.copying.exceptions import GuardrailNotFoundError
from copy_engine.domain.copying.value_objects import Guardrail

logger = logging.getLogger(__name__)


class SetGuardrailHandler(CommandHandler[SetGuardrailCommand, GuardrailDTO]):
    """Create or replace the follower's rule for a symbol (or the global one).

    Raises:
        InvalidGuardrailError: Percentage outside (0, 1].
    """

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def handle(self, command: SetGuardrailCommand) -> GuardrailDTO:
        guardrail = Guardrail(
            follower_id=command.follower_id,
            max_allocation_pct=command.max_allocation_pct,
            symbol=command.symbol,
        )

        async with self._uow:
            await self._uow.guardrails.replace(guardrail)
            await self._uow.commit()

        logger.info(
            "guardrail.set",
            extra={
                "follower_id": guardrail.follower_id,
                "symbol": guardrail.symbol,
                "max_allocation_pct": str(guardrail.max_allocation_pct),
            },
        )
        return GuardrailDTO.from_value(guardrail)


class RemoveGuardrailHandler(CommandHandler[RemoveGuardrailCommand, None]):
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def handle(self, command: RemoveGuardrailCommand) -> None:
        symbol = command.symbol.upper() if command.symbol else None

        async with self._uow:
            removed = await self._uow.guardrails.delete(command.follower_id, symbol)
            if not removed:
                raise GuardrailNotFoundError(
                    "Guardrail not found",
                    follower_id=command.follower_id,
                    symbol=symbol,
                )
            await self._uow.commit()

        logger.info(
            "guardrail.removed",
            extra={"follower_id": command.follower_id, "symbol": symbol},
        )


class GetGuardrailsHandler(QueryHandler[GetGuardrailsQuery, list[GuardrailDTO]]):
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def handle(self, query: GetGuardrailsQuery) -> list[GuardrailDTO]:
        async with self._uow:
            guardrails = await self._uow.guardrails.get_for_follower(query.follower_id)
        return [GuardrailDTO.from_value(g) for g in guardrails]
