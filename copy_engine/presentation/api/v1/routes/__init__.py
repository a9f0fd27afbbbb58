"""API v1 routes."""

from .copy_orders import router as copy_orders_router
from .delayed_copy_orders import router as delayed_copy_orders_router
from .guardrails import router as guardrails_router
from .leader_trades import router as leader_trades_router

__all__ = [
    "copy_orders_router",
    "delayed_copy_orders_router",
    "guardrails_router",
    "leader_trades_router",
]
