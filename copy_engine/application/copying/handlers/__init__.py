"""Copying command and query handlers."""

from .copy_order_handlers import CancelCopyOrderHandler, ConfirmCopyOrderFillHandler
from .delayed_copy_handlers import FlushDelayedCopyOrdersHandler, ScheduleDelayedCopyHandler
from .execute_copy_order_handler import ExecuteCopyOrderHandler
from .guardrail_handlers import GetGuardrailsHandler, RemoveGuardrailHandler, SetGuardrailHandler
from .query_handlers import (
    GetCopyOrdersHandler,
    GetCopyTradingStatsHandler,
    GetDelayedCopyOrdersHandler,
)
from .replicate_leader_trade_handler import ReplicateLeaderTradeHandler

__all__ = [
    "CancelCopyOrderHandler",
    "ConfirmCopyOrderFillHandler",
    "ExecuteCopyOrderHandler",
    "FlushDelayedCopyOrdersHandler",
    "GetCopyOrdersHandler",
    "GetCopyTradingStatsHandler",
    "GetDelayedCopyOrdersHandler",
    "GetGuardrailsHandler",
    "RemoveGuardrailHandler",
    "ReplicateLeaderTradeHandler",
    "ScheduleDelayedCopyHandler",
    "SetGuardrailHandler",
]
