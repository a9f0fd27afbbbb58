"""ReplicateLeaderTrade Handler - fans a leader fill out to followers.

This is the entry point of the replication pipeline.
"""

import asyncio
import logging
from decimal import Decimal

from copy_engine.application.copying.commands import (
    ExecuteCopyOrderCommand,
    ReplicateLeaderTradeCommand,
    ScheduleDelayedCopyCommand,
)
from copy_engine.application.copying.dtos import (
    CopyAttemptDTO,
    FollowerOutcome,
    FollowerResultDTO,
    ReplicationResultDTO,
)
from copy_engine.application.copying.services import (
    FollowerLock,
    PositionSizer,
    RiskValidationService,
    SubscriptionResolver,
)
from copy_engine.application.shared import CommandHandler, UnitOfWorkFactory
from copy_engine.domain.copying.services import SAFE_DEFAULT_FRACTION, default_fraction
from copy_engine.domain.copying.value_objects import FollowerSubscription, LeaderTradeEvent

from .delayed_copy_handlers import ScheduleDelayedCopyHandler
from .execute_copy_order_handler import ExecuteCopyOrderHandler

logger = logging.getLogger(__name__)

# Deferred followers never get more than the safe default
DEFAULT_DEFERRED_ALLOCATION = Decimal("0.03")


class ReplicateLeaderTradeHandler(
    CommandHandler[ReplicateLeaderTradeCommand, ReplicationResultDTO]
):
    """Handler for ReplicateLeaderTrade command.

    Orchestrates the fan-out:
    1. **Leader Trade**: find the persisted fill, unknown → nothing to copy
    2. **Followers**: resolve replicating subscriptions
    3. **Per follower** (concurrently, bounded, under the follower lock):
       size → risk check (one adjusted-size retry) → execute or schedule
    4. **Result**: one FollowerResultDTO per follower

    Each follower pipeline runs in its own Unit of Work and catches its own
    exceptions, so a failure for one follower never touches another.

    Example:
        >>> handler = ReplicateLeaderTradeHandler(
        ...     uow_factory=unit_of_work_factory(session_factory),
        ...     executor=execute_handler,
        ...     scheduler=schedule_handler,
        ...     sizer=PositionSizer(),
        ...     risk=RiskValidationService(),
        ...     locks=InMemoryFollowerLock(),
        ... )
        >>> result = await handler.handle(command)
        >>> print(f"Placed {result.placed_count}/{len(result.followers)}")
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        executor: ExecuteCopyOrderHandler,
        scheduler: ScheduleDelayedCopyHandler,
        sizer: PositionSizer,
        risk: RiskValidationService,
        locks: FollowerLock,
        resolver: SubscriptionResolver | None = None,
        max_parallel: int = 10,
        deferred_allocation: Decimal = DEFAULT_DEFERRED_ALLOCATION,
    ) -> None:
        """Initialize handler.

        Args:
            uow_factory: Opens one Unit of Work per follower pipeline.
            executor: Order Execution Coordinator.
            scheduler: Delayed Copy Scheduler for deferred followers.
            sizer: Position sizing service.
            risk: Risk validation service.
            locks: Per-follower single-writer lock.
            resolver: Subscription resolver.
            max_parallel: Follower pipelines running at once.
            deferred_allocation: Allocation for deferred followers, capped
                at the safe default.
        """
        self._uow_factory = uow_factory
        self._executor = executor
        self._scheduler = scheduler
        self._sizer = sizer
        self._risk = risk
        self._locks = locks
        self._resolver = resolver or SubscriptionResolver()
        self._max_parallel = max(1, max_parallel)
        self._deferred_allocation = min(deferred_allocation, SAFE_DEFAULT_FRACTION)

    async def handle(self, command: ReplicateLeaderTradeCommand) -> ReplicationResultDTO:
        """Replicate one leader fill.

        Raises:
            InvalidLeaderTradeError: If the event fails validation.
        """
        event = command.to_event()

        logger.info(
            "replicate.started",
            extra={
                "leader_id": event.leader_id,
                "symbol": event.symbol,
                "side": event.side.value,
                "quantity": event.quantity,
                "fill_price": str(event.fill_price),
            },
        )

        async with self._uow_factory() as uow:
            leader_trade = await uow.trade_history.find_leader_trade(event)
            if leader_trade is None:
                logger.warning(
                    "replicate.leader_trade_not_found",
                    extra={"leader_id": event.leader_id, "symbol": event.symbol},
                )
                return ReplicationResultDTO(
                    leader_id=event.leader_id, symbol=event.symbol, leader_trade_id=None
                )

            subscriptions = await self._resolver.resolve(uow, event.leader_id)
            leader_nav = await uow.portfolios.get_nav(event.leader_id)

        result = ReplicationResultDTO(
            leader_id=event.leader_id,
            symbol=event.symbol,
            leader_trade_id=leader_trade.id,
        )
        if not subscriptions:
            logger.info("replicate.no_followers", extra={"leader_id": event.leader_id})
            return result

        default = default_fraction(event.notional, leader_nav)
        semaphore = asyncio.Semaphore(self._max_parallel)

        async def run(subscription: FollowerSubscription) -> FollowerResultDTO:
            async with semaphore:
                return await self._replicate_for_follower(
                    subscription, event, leader_trade.id, default
                )

        result.followers = list(await asyncio.gather(*(run(s) for s in subscriptions)))

        logger.info(
            "replicate.completed",
            extra={
                "leader_id": event.leader_id,
                "leader_trade_id": leader_trade.id,
                "followers": len(result.followers),
                "placed": result.placed_count,
                "scheduled": result.scheduled_count,
                "failed": result.failed_count,
                "skipped": result.skipped_count,
            },
        )
        return result

    async def _replicate_for_follower(
        self,
        subscription: FollowerSubscription,
        event: LeaderTradeEvent,
        leader_trade_id: int,
        default: Decimal,
    ) -> FollowerResultDTO:
        follower_id = subscription.follower_id
        try:
            async with self._locks.hold(follower_id):
                return await self._run_pipeline(subscription, event, leader_trade_id, default)
        except Exception as e:
            logger.error(
                "replicate.follower_failed",
                extra={
                    "follower_id": follower_id,
                    "leader_trade_id": leader_trade_id,
                    "error": str(e),
                },
                exc_info=True,
            )
            return FollowerResultDTO(
                follower_id=follower_id, outcome=FollowerOutcome.ERROR, reason=str(e)
            )

    async def _run_pipeline(
        self,
        subscription: FollowerSubscription,
        event: LeaderTradeEvent,
        leader_trade_id: int,
        default: Decimal,
    ) -> FollowerResultDTO:
        follower_id = subscription.follower_id
        strategy: str | None = None

        async with self._uow_factory() as uow:
            snapshot = await self._risk.load_snapshot(uow, follower_id)
            if snapshot is None:
                logger.info("replicate.unknown_follower", extra={"follower_id": follower_id})
                return FollowerResultDTO(
                    follower_id=follower_id,
                    outcome=FollowerOutcome.SKIPPED_UNKNOWN_FOLLOWER,
                )

            if subscription.deferred_mode:
                proposed = self._deferred_allocation
            else:
                tier = await uow.copy_orders.count_for_follower(follower_id)
                proposal = await self._sizer.propose(
                    uow,
                    follower_id=follower_id,
                    leader_id=event.leader_id,
                    symbol=event.symbol,
                    default=default,
                    experience_tier=tier,
                    snapshot=snapshot,
                )
                proposed = proposal.fraction
                strategy = proposal.strategy.value

            risk = await self._risk.arbitrate(uow, snapshot, follower_id, event.symbol, proposed)

        if not risk.allowed:
            return FollowerResultDTO(
                follower_id=follower_id,
                outcome=FollowerOutcome.SKIPPED_RISK,
                strategy=strategy,
                allocation=proposed,
                reason=risk.decision.reason,
            )

        allocation = risk.approved_size

        if subscription.deferred_mode:
            attempt = await self._scheduler.handle(
                ScheduleDelayedCopyCommand(
                    follower_id=follower_id,
                    leader_id=event.leader_id,
                    leader_trade_id=leader_trade_id,
                    account_number=event.account_number,
                    symbol=event.symbol,
                    side=event.side,
                    fill_price=event.fill_price,
                    allocation=allocation,
                    follower_nav=snapshot.nav,
                )
            )
        else:
            attempt = await self._executor.handle(
                ExecuteCopyOrderCommand(
                    follower_id=follower_id,
                    leader_id=event.leader_id,
                    leader_trade_id=leader_trade_id,
                    account_number=event.account_number,
                    symbol=event.symbol,
                    side=event.side,
                    fill_price=event.fill_price,
                    allocation=allocation,
                    follower_nav=snapshot.nav,
                )
            )

        return self._to_result(follower_id, strategy, allocation, attempt)

    @staticmethod
    def _to_result(
        follower_id: int,
        strategy: str | None,
        allocation: Decimal | None,
        attempt: CopyAttemptDTO,
    ) -> FollowerResultDTO:
        return FollowerResultDTO(
            follower_id=follower_id,
            outcome=attempt.outcome,
            strategy=strategy,
            allocation=allocation,
            quantity=attempt.quantity,
            copy_order_id=attempt.copy_order.id if attempt.copy_order else None,
            delayed_copy_order_id=(
                attempt.delayed_copy_order.id if attempt.delayed_copy_order else None
            ),
            reason=attempt.reason,
        )
