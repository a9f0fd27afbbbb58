"""Dependency injection for FastAPI.

Provides dependencies for API routes:
- Unit of Work per request
- Copy order, guardrail and query handlers
- Leader trade dispatcher (Celery)
- Follower authentication
"""

from typing import Annotated, Any, Callable

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from copy_engine.application.copying.handlers import (
    CancelCopyOrderHandler,
    ConfirmCopyOrderFillHandler,
    GetCopyOrdersHandler,
    GetCopyTradingStatsHandler,
    GetDelayedCopyOrdersHandler,
    GetGuardrailsHandler,
    RemoveGuardrailHandler,
    SetGuardrailHandler,
)
from copy_engine.application.copying.services import FollowerLock, InMemoryFollowerLock
from copy_engine.infrastructure.messaging import get_event_bus
from copy_engine.infrastructure.persistence.sqlalchemy import (
    SQLAlchemyUnitOfWork,
    create_unit_of_work,
)

# Enqueues a leader trade payload, returns the task id
LeaderTradeDispatcher = Callable[[dict[str, Any]], str]

# ============================================================================
# GLOBAL DEPENDENCIES (initialized in main.py lifespan)
# ============================================================================

_session_factory: async_sessionmaker[AsyncSession] | None = None
_dispatcher: LeaderTradeDispatcher | None = None
_locks: FollowerLock = InMemoryFollowerLock()


def init_dependencies(
    session_factory: async_sessionmaker[AsyncSession],
    dispatcher: LeaderTradeDispatcher | None = None,
    locks: FollowerLock | None = None,
) -> None:
    """Initialize global dependencies. Called at FastAPI startup."""
    global _session_factory, _dispatcher, _locks
    _session_factory = session_factory
    _dispatcher = dispatcher or celery_dispatcher
    _locks = locks or InMemoryFollowerLock()


def celery_dispatcher(payload: dict[str, Any]) -> str:
    # Imported lazily: the Celery app reads broker settings at import time
    from copy_engine.presentation.workers.tasks import replicate_leader_trade

    return replicate_leader_trade.delay(payload).id


# ============================================================================
# AUTHENTICATION
# ============================================================================


async def get_current_user_id(
    authorization: Annotated[str | None, Header()] = None,
) -> int:
    """Get current follower ID from the Authorization header.

    Authentication is owned by the platform gateway; this service only
    reads the ``Bearer user_id=<id>`` header it forwards.

    Raises:
        HTTPException: 401 if the header is missing or malformed.
    """
    if authorization is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        if not authorization.startswith("Bearer "):
            raise ValueError("Invalid authorization format")

        token = authorization.removeprefix("Bearer ")
        if "user_id=" not in token:
            raise ValueError("Missing user_id")

        user_id = int(token.split("user_id=")[1])
        if user_id <= 0:
            raise ValueError("Invalid user_id")

        return user_id

    except (ValueError, IndexError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authorization token: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        )


# ============================================================================
# UNIT OF WORK
# ============================================================================


async def get_unit_of_work() -> SQLAlchemyUnitOfWork:
    """Unit of Work for the current request.

    Raises:
        RuntimeError: If dependencies not initialized.
    """
    if _session_factory is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies() first.")

    return create_unit_of_work(_session_factory)


async def get_leader_trade_dispatcher() -> LeaderTradeDispatcher:
    if _dispatcher is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies() first.")
    return _dispatcher


UnitOfWorkDep = Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]


# ============================================================================
# HANDLERS
# ============================================================================


async def get_cancel_copy_order_handler(uow: UnitOfWorkDep) -> CancelCopyOrderHandler:
    return CancelCopyOrderHandler(uow=uow, event_bus=get_event_bus(), locks=_locks)


async def get_confirm_fill_handler(uow: UnitOfWorkDep) -> ConfirmCopyOrderFillHandler:
    return ConfirmCopyOrderFillHandler(uow=uow, event_bus=get_event_bus())


async def get_set_guardrail_handler(uow: UnitOfWorkDep) -> SetGuardrailHandler:
    return SetGuardrailHandler(uow=uow)


async def get_remove_guardrail_handler(uow: UnitOfWorkDep) -> RemoveGuardrailHandler:
    return RemoveGuardrailHandler(uow=uow)


async def get_guardrails_handler(uow: UnitOfWorkDep) -> GetGuardrailsHandler:
    return GetGuardrailsHandler(uow=uow)


async def get_copy_orders_handler(uow: UnitOfWorkDep) -> GetCopyOrdersHandler:
    return GetCopyOrdersHandler(uow=uow)


async def get_copy_stats_handler(uow: UnitOfWorkDep) -> GetCopyTradingStatsHandler:
    return GetCopyTradingStatsHandler(uow=uow)


async def get_delayed_copy_orders_handler(uow: UnitOfWorkDep) -> GetDelayedCopyOrdersHandler:
    return GetDelayedCopyOrdersHandler(uow=uow)


# ============================================================================
# TYPE ALIASES (for cleaner route signatures)
# ============================================================================

CurrentUserId = Annotated[int, Depends(get_current_user_id)]

LeaderTradeDispatcherDep = Annotated[LeaderTradeDispatcher, Depends(get_leader_trade_dispatcher)]

CancelCopyOrderHandlerDep = Annotated[
    CancelCopyOrderHandler, Depends(get_cancel_copy_order_handler)
]
ConfirmFillHandlerDep = Annotated[
    ConfirmCopyOrderFillHandler, Depends(get_confirm_fill_handler)
]
SetGuardrailHandlerDep = Annotated[SetGuardrailHandler, Depends(get_set_guardrail_handler)]
RemoveGuardrailHandlerDep = Annotated[
    RemoveGuardrailHandler, Depends(get_remove_guardrail_handler)
]
GetGuardrailsHandlerDep = Annotated[GetGuardrailsHandler, Depends(get_guardrails_handler)]
GetCopyOrdersHandlerDep = Annotated[GetCopyOrdersHandler, Depends(get_copy_orders_handler)]
GetCopyStatsHandlerDep = Annotated[GetCopyTradingStatsHandler, Depends(get_copy_stats_handler)]
GetDelayedCopyOrdersHandlerDep = Annotated[
    GetDelayedCopyOrdersHandler, Depends(get_delayed_copy_orders_handler)
]
