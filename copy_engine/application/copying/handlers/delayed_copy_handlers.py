"""Delayed Copy Scheduler handlers - enqueue for the cutoff, flush when due."""

import logging
from datetime import timezone, tzinfo

from copy_engine.application.copying.commands import (
    ExecuteCopyOrderCommand,
    FlushDelayedCopyOrdersCommand,
    ScheduleDelayedCopyCommand,
)
from copy_engine.application.copying.dtos import (
    CopyAttemptDTO,
    DelayedCopyOrderDTO,
    FlushResultDTO,
    FollowerOutcome,
)
from copy_engine.application.copying.services import FollowerLock
from copy_engine.application.shared import Clock, CommandHandler, UnitOfWorkFactory, utcnow
from copy_engine.domain.copying.entities import DelayedCopyOrder
from copy_engine.domain.copying.exceptions import DuplicateCopyOrderError
from copy_engine.domain.copying.services import next_cutoff, quantity_for_allocation
from copy_engine.domain.copying.value_objects import CopyOrderStatus
from copy_engine.infrastructure.messaging import EventBus

from .execute_copy_order_handler import ExecuteCopyOrderHandler

logger = logging.getLogger(__name__)


class ScheduleDelayedCopyHandler(CommandHandler[ScheduleDelayedCopyCommand, CopyAttemptDTO]):
    """Queue a follower's copy until the next daily cutoff.

    The quantity is fixed now, from the allocation and the follower's
    current NAV. One delayed order per (leader trade, follower).
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        event_bus: EventBus,
        market_tz: tzinfo = timezone.utc,
        cutoff_hour: int = 16,
        cutoff_minute: int = 0,
        clock: Clock = utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._event_bus = event_bus
        self._market_tz = market_tz
        self._cutoff_hour = cutoff_hour
        self._cutoff_minute = cutoff_minute
        self._clock = clock

    async def handle(self, command: ScheduleDelayedCopyCommand) -> CopyAttemptDTO:
        log_context = {
            "follower_id": command.follower_id,
            "leader_trade_id": command.leader_trade_id,
            "symbol": command.symbol,
        }

        quantity = quantity_for_allocation(
            command.allocation, command.follower_nav, command.fill_price
        )
        if quantity < 1:
            logger.info("delayed_copy.quantity_underflow", extra=log_context)
            return CopyAttemptDTO(outcome=FollowerOutcome.SKIPPED_UNDERFLOW)

        try:
            async with self._uow_factory() as uow:
                existing = await uow.delayed_copy_orders.get_by_trade_and_follower(
                    command.leader_trade_id, command.follower_id
                )
                if existing is not None:
                    logger.info(
                        "delayed_copy.duplicate",
                        extra={**log_context, "delayed_copy_order_id": existing.id},
                    )
                    return CopyAttemptDTO(
                        outcome=FollowerOutcome.SKIPPED_DUPLICATE,
                        quantity=existing.quantity,
                        delayed_copy_order=DelayedCopyOrderDTO.from_entity(existing),
                    )

                scheduled_for = next_cutoff(
                    self._clock(), self._market_tz, self._cutoff_hour, self._cutoff_minute
                )
                order = DelayedCopyOrder.schedule(
                    original_trade_id=command.leader_trade_id,
                    follower_id=command.follower_id,
                    leader_id=command.leader_id,
                    account_number=command.account_number,
                    symbol=command.symbol,
                    side=command.side,
                    quantity=quantity,
                    scheduled_for=scheduled_for,
                )
                await uow.delayed_copy_orders.save(order)
                order.record_scheduled()
                await uow.commit()

        except DuplicateCopyOrderError:
            logger.info("delayed_copy.duplicate_insert", extra=log_context)
            return CopyAttemptDTO(outcome=FollowerOutcome.SKIPPED_DUPLICATE)

        events = order.get_domain_events()
        await self._event_bus.publish_all(events)
        order.clear_domain_events()

        logger.info(
            "delayed_copy.scheduled",
            extra={
                **log_context,
                "delayed_copy_order_id": order.id,
                "quantity": quantity,
                "scheduled_for": scheduled_for.isoformat(),
            },
        )

        return CopyAttemptDTO(
            outcome=FollowerOutcome.SCHEDULED,
            quantity=quantity,
            delayed_copy_order=DelayedCopyOrderDTO.from_entity(order),
        )


class FlushDelayedCopyOrdersHandler(
    CommandHandler[FlushDelayedCopyOrdersCommand, FlushResultDTO]
):
    """Execute every due delayed copy through the execution coordinator.

    Each order gets its own transaction: one failure never rolls back the
    orders already executed in the batch. Orders leave PENDING either way,
    so they are never picked up again.

    Example:
        >>> result = await handler.handle(FlushDelayedCopyOrdersCommand())
        >>> result.executed, result.failed
        (3, 1)
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        executor: ExecuteCopyOrderHandler,
        locks: FollowerLock,
        clock: Clock = utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._executor = executor
        self._locks = locks
        self._clock = clock

    async def handle(self, command: FlushDelayedCopyOrdersCommand) -> FlushResultDTO:
        now = command.now or self._clock()

        async with self._uow_factory() as uow:
            due = await uow.delayed_copy_orders.get_due(now, limit=command.limit)

        logger.info("delayed_copy.flush_started", extra={"due_count": len(due)})

        result = FlushResultDTO()
        for delayed in due:
            result.processed += 1

            async with self._locks.hold(delayed.follower_id):
                copy_order_id, error = await self._execute(delayed)

            recorded = await self._record(delayed, copy_order_id, error)
            if not recorded:
                continue

            if error is None:
                result.executed += 1
            else:
                result.failed += 1
            result.delayed_copy_order_ids.append(delayed.id)

        logger.info(
            "delayed_copy.flush_completed",
            extra={
                "processed": result.processed,
                "executed": result.executed,
                "failed": result.failed,
            },
        )
        return result

    async def _execute(self, delayed: DelayedCopyOrder) -> tuple[int | None, str | None]:
        """Run one delayed order.

        Returns:
            (copy_order_id, error); error is None when the order was placed.
        """
        try:
            attempt = await self._executor.handle(
                ExecuteCopyOrderCommand(
                    follower_id=delayed.follower_id,
                    leader_id=delayed.leader_id,
                    leader_trade_id=delayed.original_trade_id,
                    account_number=delayed.account_number,
                    symbol=delayed.symbol,
                    side=delayed.side,
                    quantity=delayed.quantity,
                )
            )
        except Exception as e:
            logger.error(
                "delayed_copy.execution_error",
                extra={"delayed_copy_order_id": delayed.id, "error": str(e)},
                exc_info=True,
            )
            return None, str(e) or e.__class__.__name__

        copy_order = attempt.copy_order
        copy_order_id = copy_order.id if copy_order else None

        if attempt.outcome == FollowerOutcome.PLACED:
            return copy_order_id, None

        if attempt.outcome == FollowerOutcome.SKIPPED_DUPLICATE:
            # Already copied by an earlier run
            if copy_order is None or copy_order.status not in (
                CopyOrderStatus.FAILED.value,
                CopyOrderStatus.CANCELLED.value,
            ):
                return copy_order_id, None
            return copy_order_id, copy_order.error_message or f"Copy order {copy_order.status}"

        if attempt.outcome == FollowerOutcome.FAILED:
            return copy_order_id, attempt.reason or "Brokerage order failed"

        if attempt.outcome == FollowerOutcome.SKIPPED_NO_CONNECTION:
            return None, "No active brokerage connection"

        if attempt.outcome == FollowerOutcome.CANCELLED:
            return copy_order_id, "Copy order cancelled"

        return copy_order_id, attempt.reason or attempt.outcome.value

    async def _record(
        self, delayed: DelayedCopyOrder, copy_order_id: int | None, error: str | None
    ) -> bool:
        """Persist the delayed order's final status in its own transaction."""
        try:
            async with self._uow_factory() as uow:
                order = await uow.delayed_copy_orders.get_by_id(delayed.id)
                if order is None or not order.is_pending:
                    logger.warning(
                        "delayed_copy.already_processed",
                        extra={"delayed_copy_order_id": delayed.id},
                    )
                    return False

                if error is None:
                    order.mark_executed(copy_order_id)
                else:
                    order.mark_failed(error, copy_order_id=copy_order_id)

                await uow.delayed_copy_orders.save(order)
                await uow.commit()
        except Exception as e:
            logger.error(
                "delayed_copy.record_failed",
                extra={"delayed_copy_order_id": delayed.id, "error": str(e)},
                exc_info=True,
            )
            return False

        logger.info(
            "delayed_copy.executed" if error is None else "delayed_copy.failed",
            extra={
                "delayed_copy_order_id": delayed.id,
                "copy_order_id": copy_order_id,
                "error": error,
            },
        )
        return True
