"""Follower-facing copy order handlers - cancel and fill confirmation."""

import logging

from copy_engine.application.copying.commands import (
    CancelCopyOrderCommand,
    ConfirmCopyOrderFillCommand,
)
from copy_engine.application.copying.dtos import CopyOrderDTO
from copy_engine.application.copying.services import FollowerLock, InMemoryFollowerLock
from copy_engine.application.shared import CommandHandler, UnitOfWork
from copy_engine.domain.copying.exceptions import CopyOrderNotFoundError
from copy_engine.infrastructure.messaging import EventBus

logger = logging.getLogger(__name__)


class CancelCopyOrderHandler(CommandHandler[CancelCopyOrderCommand, CopyOrderDTO]):
    """Cancel a QUEUED copy order owned by the follower.

    PLACED orders are already at the brokerage and cannot be cancelled here.
    The follower's lock is held while cancelling, so a cancel cannot land
    between the executor's pre-submit check and its brokerage call.

    Raises:
        CopyOrderNotFoundError: Unknown order or owned by someone else.
        InvalidCopyOrderStateError: Order already left QUEUED.
    """

    def __init__(
        self, uow: UnitOfWork, event_bus: EventBus, locks: FollowerLock | None = None
    ) -> None:
        self._uow = uow
        self._event_bus = event_bus
        self._locks = locks or InMemoryFollowerLock()

    async def handle(self, command: CancelCopyOrderCommand) -> CopyOrderDTO:
        async with self._locks.hold(command.follower_id):
            async with self._uow:
                order = await self._uow.copy_orders.get_by_id(command.copy_order_id)
                if order is None or order.follower_id != command.follower_id:
                    raise CopyOrderNotFoundError(
                        f"Copy order {command.copy_order_id} not found",
                        copy_order_id=command.copy_order_id,
                        follower_id=command.follower_id,
                    )

                order.cancel()
                await self._uow.copy_orders.save(order)
                await self._uow.commit()

        await self._event_bus.publish_all(order.get_domain_events())
        order.clear_domain_events()

        logger.info(
            "copy_order.cancelled",
            extra={"copy_order_id": order.id, "follower_id": order.follower_id},
        )
        return CopyOrderDTO.from_entity(order)


class ConfirmCopyOrderFillHandler(CommandHandler[ConfirmCopyOrderFillCommand, CopyOrderDTO]):
    """Mark a PLACED order FILLED once the brokerage reports the fill."""

    def __init__(self, uow: UnitOfWork, event_bus: EventBus) -> None:
        self._uow = uow
        self._event_bus = event_bus

    async def handle(self, command: ConfirmCopyOrderFillCommand) -> CopyOrderDTO:
        async with self._uow:
            order = await self._uow.copy_orders.get_by_id(command.copy_order_id)
            if order is None:
                raise CopyOrderNotFoundError(
                    f"Copy order {command.copy_order_id} not found",
                    copy_order_id=command.copy_order_id,
                )

            order.confirm_fill(filled_at=command.filled_at)
            await self._uow.copy_orders.save(order)
            await self._uow.commit()

        await self._event_bus.publish_all(order.get_domain_events())
        order.clear_domain_events()

        logger.info("copy_order.fill_confirmed", extra={"copy_order_id": order.id})
        return CopyOrderDTO.from_entity(order)
