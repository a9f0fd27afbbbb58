"""Copy Trading Celery Tasks.

Thin wrappers around the application handlers.

Architecture:
    replicate_leader_trade → ReplicateLeaderTradeHandler
                               → PositionSizer / RiskValidationService
                               → ExecuteCopyOrderHandler | ScheduleDelayedCopyHandler
    flush_delayed_copy_orders → FlushDelayedCopyOrdersHandler
                               → ExecuteCopyOrderHandler

Usage:
    >>> replicate_leader_trade.delay(event_payload)
    >>> flush_delayed_copy_orders.delay()
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from functools import wraps
from typing import Any

from celery import shared_task
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from copy_engine.application.copying.commands import (
    FlushDelayedCopyOrdersCommand,
    ReplicateLeaderTradeCommand,
)
from copy_engine.application.copying.handlers import (
    ExecuteCopyOrderHandler,
    FlushDelayedCopyOrdersHandler,
    ReplicateLeaderTradeHandler,
    ScheduleDelayedCopyHandler,
)
from copy_engine.application.copying.services import (
    FollowerLock,
    PositionSizer,
    RiskValidationService,
)
from copy_engine.config import Settings, bind_request_context, clear_request_context, get_settings
from copy_engine.domain.brokerage.ports import BrokeragePort
from copy_engine.infrastructure.brokerage import ResilientBrokerage, SnapTradeAdapter
from copy_engine.infrastructure.locks import build_follower_lock
from copy_engine.infrastructure.messaging import get_event_bus, register_default_subscribers
from copy_engine.infrastructure.persistence.sqlalchemy import (
    create_engine,
    create_session_factory,
    unit_of_work_factory,
)

logger = logging.getLogger(__name__)

# Created once per worker process, on the worker's event loop
_loop: asyncio.AbstractEventLoop | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None
_handlers: "CopyEngineHandlers | None" = None


def _get_loop() -> asyncio.AbstractEventLoop:
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
        asyncio.set_event_loop(_loop)
    return _loop


def async_task(f):
    """Run an async task body on the worker's event loop.

    The loop is kept for the life of the worker process, so the engine
    pool, Redis client and circuit breakers survive between tasks.
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        return _get_loop().run_until_complete(f(*args, **kwargs))

    return wrapper


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create async session factory (singleton per worker)."""
    global _session_factory

    if _session_factory is None:
        _session_factory = create_session_factory(create_engine(get_settings()))

    return _session_factory


@dataclass
class CopyEngineHandlers:
    replicate: ReplicateLeaderTradeHandler
    flush: FlushDelayedCopyOrdersHandler


def build_handlers(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    brokerage: BrokeragePort | None = None,
    locks: FollowerLock | None = None,
) -> CopyEngineHandlers:
    """Wire the replication and flush handlers from settings."""
    if brokerage is None:
        brokerage = ResilientBrokerage(
            SnapTradeAdapter(
                client_id=settings.snaptrade_client_id,
                consumer_key=settings.snaptrade_consumer_key,
                base_url=settings.snaptrade_base_url,
                timeout=settings.brokerage_timeout_seconds,
            ),
            max_retries=settings.brokerage_max_retries,
            base_delay=settings.brokerage_retry_base_delay,
            max_delay=settings.brokerage_retry_max_delay,
            failure_threshold=settings.circuit_breaker_failure_threshold,
            recovery_timeout=settings.circuit_breaker_recovery_timeout,
            success_threshold=settings.circuit_breaker_success_threshold,
        )
    locks = locks or build_follower_lock(settings)

    event_bus = get_event_bus()
    register_default_subscribers(event_bus)

    uow_factory = unit_of_work_factory(session_factory)
    executor = ExecuteCopyOrderHandler(
        uow_factory=uow_factory, brokerage=brokerage, event_bus=event_bus
    )
    scheduler = ScheduleDelayedCopyHandler(
        uow_factory=uow_factory,
        event_bus=event_bus,
        market_tz=settings.market_tz,
        cutoff_hour=settings.delayed_copy_cutoff_hour,
        cutoff_minute=settings.delayed_copy_cutoff_minute,
    )
    replicate = ReplicateLeaderTradeHandler(
        uow_factory=uow_factory,
        executor=executor,
        scheduler=scheduler,
        sizer=PositionSizer(),
        risk=RiskValidationService(
            limits=settings.risk_limits,
            market_tz=settings.market_tz,
            auto_apply_adjusted_size=settings.copy_auto_apply_adjusted_size,
        ),
        locks=locks,
        max_parallel=settings.copy_max_parallel_followers,
        deferred_allocation=settings.delayed_copy_allocation_pct,
    )
    flush = FlushDelayedCopyOrdersHandler(
        uow_factory=uow_factory, executor=executor, locks=locks
    )
    return CopyEngineHandlers(replicate=replicate, flush=flush)


def get_handlers() -> CopyEngineHandlers:
    global _handlers

    if _handlers is None:
        _handlers = build_handlers(get_session_factory(), get_settings())

    return _handlers


def parse_leader_trade(payload: dict[str, Any]) -> ReplicateLeaderTradeCommand:
    """Build the command from a JSON task payload (camelCase or snake_case)."""

    def field(snake: str, camel: str) -> Any:
        return payload[snake] if snake in payload else payload[camel]

    filled_at = datetime.fromisoformat(str(field("filled_at", "filledAt")))
    if filled_at.tzinfo is None:
        filled_at = filled_at.replace(tzinfo=timezone.utc)

    return ReplicateLeaderTradeCommand(
        leader_id=int(field("leader_id", "leaderId")),
        broker_connection_id=int(field("broker_connection_id", "brokerConnectionId")),
        account_number=str(field("account_number", "accountNumber")),
        symbol=str(payload["symbol"]),
        side=str(payload["side"]),
        quantity=int(payload["quantity"]),
        fill_price=Decimal(str(field("fill_price", "fillPrice"))),
        filled_at=filled_at,
    )


@shared_task(bind=True, max_retries=0)
@async_task
async def replicate_leader_trade(self, event: dict[str, Any]) -> dict[str, Any]:
    """Replicate one leader fill to every eligible follower.

    Redelivery after a worker crash is safe: followers that already have a
    copy order for the leader trade are skipped.
    """
    bind_request_context(request_id=self.request.id or "local", task="replicate_leader_trade")
    try:
        command = parse_leader_trade(event)
        result = await get_handlers().replicate.handle(command)

        logger.info(
            "replicate_leader_trade.completed",
            extra={
                "leader_id": result.leader_id,
                "leader_trade_id": result.leader_trade_id,
                "followers": len(result.followers),
                "placed": result.placed_count,
                "failed": result.failed_count,
                "scheduled": result.scheduled_count,
                "skipped": result.skipped_count,
            },
        )

        return {
            "status": "processed" if result.leader_trade_id is not None else "unknown_trade",
            "leader_trade_id": result.leader_trade_id,
            "placed": result.placed_count,
            "failed": result.failed_count,
            "scheduled": result.scheduled_count,
            "skipped": result.skipped_count,
            "followers": [
                {
                    "follower_id": f.follower_id,
                    "outcome": f.outcome.value,
                    "quantity": f.quantity,
                    "copy_order_id": f.copy_order_id,
                    "reason": f.reason,
                }
                for f in result.followers
            ],
        }

    except Exception as e:
        logger.error(
            "replicate_leader_trade.error",
            extra={"error": str(e)},
            exc_info=True,
        )
        raise
    finally:
        clear_request_context()


@shared_task(bind=True, max_retries=0)
@async_task
async def flush_delayed_copy_orders(self, limit: int | None = None) -> dict[str, Any]:
    """Execute every due delayed copy order. Scheduled daily at the cutoff."""
    bind_request_context(request_id=self.request.id or "local", task="flush_delayed_copy_orders")
    try:
        result = await get_handlers().flush.handle(FlushDelayedCopyOrdersCommand(limit=limit))

        logger.info(
            "flush_delayed_copy_orders.completed",
            extra={
                "processed": result.processed,
                "executed": result.executed,
                "failed": result.failed,
            },
        )
        return {
            "status": "flushed",
            "processed": result.processed,
            "executed": result.executed,
            "failed": result.failed,
        }
    finally:
        clear_request_context()
