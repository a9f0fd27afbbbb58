"""ExecuteCopyOrder Handler - the Order Execution Coordinator.

Turns an approved allocation into a brokerage order for one follower.
"""

import logging
from decimal import Decimal

from copy_engine.application.copying.commands import ExecuteCopyOrderCommand
from copy_engine.application.copying.dtos import CopyAttemptDTO, CopyOrderDTO, FollowerOutcome
from copy_engine.application.shared import CommandHandler, UnitOfWorkFactory
from copy_engine.domain.brokerage.ports import BrokeragePort
from copy_engine.domain.brokerage.value_objects import OrderReceipt
from copy_engine.domain.copying.entities import CopyOrder
from copy_engine.domain.copying.exceptions import CopyOrderNotFoundError, DuplicateCopyOrderError
from copy_engine.domain.copying.services import quantity_for_allocation
from copy_engine.domain.copying.value_objects import CopyOrderStatus
from copy_engine.infrastructure.messaging import EventBus

logger = logging.getLogger(__name__)


class ExecuteCopyOrderHandler(CommandHandler[ExecuteCopyOrderCommand, CopyAttemptDTO]):
    """Handler for ExecuteCopyOrder command.

    Orchestrates one follower's order:
    1. **Quantity**: floor(allocation × NAV / price); below 1 share → skip
    2. **Connection**: follower's active brokerage connection, none → skip
    3. **Idempotency**: existing order for (leader trade, follower) → skip
    4. **Phase 1 (RESERVE)**: create CopyOrder QUEUED, commit
    5. **Brokerage Call**: place_order (retry + circuit breaker inside the port)
    6. **Phase 2 (CONFIRM)**: mark PLACED or FAILED, commit
    7. **Publish Events**: CopyExecutedEvent

    Brokerage errors never escape: they end in a FAILED order.

    Example:
        >>> handler = ExecuteCopyOrderHandler(
        ...     uow_factory=unit_of_work_factory(session_factory),
        ...     brokerage=resilient_brokerage,
        ...     event_bus=event_bus,
        ... )
        >>> attempt = await handler.handle(command)
        >>> attempt.outcome
        <FollowerOutcome.PLACED: 'placed'>
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        brokerage: BrokeragePort,
        event_bus: EventBus,
    ) -> None:
        """Initialize handler.

        Args:
            uow_factory: Opens a fresh Unit of Work per phase.
            brokerage: Brokerage port used to submit orders.
            event_bus: Event bus for publishing domain events.
        """
        self._uow_factory = uow_factory
        self._brokerage = brokerage
        self._event_bus = event_bus

    async def handle(self, command: ExecuteCopyOrderCommand) -> CopyAttemptDTO:
        log_context = {
            "follower_id": command.follower_id,
            "leader_trade_id": command.leader_trade_id,
            "symbol": command.symbol,
        }

        # ===== PHASE 1: RESERVE =====
        try:
            async with self._uow_factory() as uow:
                quantity = command.quantity
                if quantity is None:
                    nav = command.follower_nav
                    if nav is None:
                        nav = await uow.portfolios.get_nav(command.follower_id)
                    quantity = quantity_for_allocation(
                        command.allocation or Decimal("0"),
                        nav,
                        command.fill_price or Decimal("0"),
                    )

                if quantity < 1:
                    logger.info(
                        "execute_copy_order.quantity_underflow",
                        extra={**log_context, "allocation": str(command.allocation)},
                    )
                    return CopyAttemptDTO(outcome=FollowerOutcome.SKIPPED_UNDERFLOW)

                connection = await uow.broker_connections.get_active_for_user(
                    command.follower_id
                )
                if connection is None:
                    logger.info("execute_copy_order.no_connection", extra=log_context)
                    return CopyAttemptDTO(
                        outcome=FollowerOutcome.SKIPPED_NO_CONNECTION, quantity=quantity
                    )

                existing = await uow.copy_orders.get_by_leader_trade_and_follower(
                    command.leader_trade_id, command.follower_id
                )
                if existing is not None:
                    logger.info(
                        "execute_copy_order.duplicate",
                        extra={**log_context, "copy_order_id": existing.id},
                    )
                    return CopyAttemptDTO(
                        outcome=FollowerOutcome.SKIPPED_DUPLICATE,
                        quantity=existing.quantity,
                        copy_order=CopyOrderDTO.from_entity(existing),
                    )

                order = CopyOrder.create_queued(
                    leader_trade_id=command.leader_trade_id,
                    follower_id=command.follower_id,
                    leader_id=command.leader_id,
                    symbol=command.symbol,
                    side=command.side,
                    quantity=quantity,
                )
                await uow.copy_orders.save(order)
                await uow.commit()

        except DuplicateCopyOrderError:
            # Another delivery of the same leader trade won the insert
            logger.info("execute_copy_order.duplicate_insert", extra=log_context)
            return CopyAttemptDTO(
                outcome=FollowerOutcome.SKIPPED_DUPLICATE,
                copy_order=await self._load_existing(command),
            )

        order_id = order.id
        log_context["copy_order_id"] = order_id
        logger.info(
            "execute_copy_order.phase1_committed",
            extra={**log_context, "quantity": quantity},
        )

        # Cancelled while queued → never submitted
        async with self._uow_factory() as uow:
            current = await uow.copy_orders.get_by_id(order_id)
        if current is None or not current.is_queued:
            logger.info("execute_copy_order.cancelled_before_submit", extra=log_context)
            return CopyAttemptDTO(
                outcome=FollowerOutcome.CANCELLED,
                quantity=quantity,
                copy_order=CopyOrderDTO.from_entity(current) if current else None,
                reason="cancelled before submission",
            )

        # ===== BROKERAGE CALL =====
        receipt: OrderReceipt | None = None
        error: str | None = None
        try:
            receipt = await self._brokerage.place_order(
                authorization_id=connection.authorization_id,
                account_number=command.account_number,
                symbol=order.symbol,
                side=order.side.value,
                quantity=quantity,
            )
            logger.info(
                "execute_copy_order.brokerage_success",
                extra={**log_context, "broker_order_id": receipt.order_id},
            )
        except Exception as e:
            error = str(e) or e.__class__.__name__
            logger.error(
                "execute_copy_order.brokerage_failed",
                extra={**log_context, "error": error},
            )

        # ===== PHASE 2: CONFIRM / ROLLBACK =====
        async with self._uow_factory() as uow:
            order = await uow.copy_orders.get_by_id(order_id)
            if order is None:
                raise CopyOrderNotFoundError(
                    f"Copy order {order_id} not found", copy_order_id=order_id
                )

            if not order.is_queued:
                # Cancelled while the brokerage call was in flight
                if receipt is None or order.status != CopyOrderStatus.CANCELLED:
                    logger.warning(
                        "execute_copy_order.cancelled_during_submit",
                        extra={**log_context, "status": order.status.value},
                    )
                    return CopyAttemptDTO(
                        outcome=FollowerOutcome.CANCELLED,
                        quantity=quantity,
                        copy_order=CopyOrderDTO.from_entity(order),
                        reason="cancelled during submission",
                    )

                # The brokerage already holds the order; the record follows it
                logger.error(
                    "execute_copy_order.cancel_lost_to_placement",
                    extra={**log_context, "broker_order_id": receipt.order_id},
                )
                order.record_late_placement(receipt.order_id)
            elif receipt is not None:
                order.mark_placed(broker_order_id=receipt.order_id)
            else:
                order.fail(error or "Unknown brokerage error")

            await uow.copy_orders.save(order)
            await uow.commit()

        # Publish after commit
        events = order.get_domain_events()
        await self._event_bus.publish_all(events)
        order.clear_domain_events()

        outcome = FollowerOutcome.PLACED if order.is_placed else FollowerOutcome.FAILED
        logger.info(
            "execute_copy_order.completed",
            extra={**log_context, "status": order.status.value},
        )

        return CopyAttemptDTO(
            outcome=outcome,
            quantity=quantity,
            copy_order=CopyOrderDTO.from_entity(order),
            reason=order.error_message,
        )

    async def _load_existing(self, command: ExecuteCopyOrderCommand) -> CopyOrderDTO | None:
        async with self._uow_factory() as uow:
            existing = await uow.copy_orders.get_by_leader_trade_and_follower(
                command.leader_trade_id, command.follower_id
            )
        return CopyOrderDTO.from_entity(existing) if existing else None
