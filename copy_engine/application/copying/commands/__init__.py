"""Copying commands (write operations)."""

from .delayed_copy import FlushDelayedCopyOrdersCommand, ScheduleDelayedCopyCommand
from .execute_copy_order import ExecuteCopyOrderCommand
from .manage_copy_orders import (
    CancelCopyOrderCommand,
    ConfirmCopyOrderFillCommand,
    RemoveGuardrailCommand,
    SetGuardrailCommand,
)
from .replicate_leader_trade import ReplicateLeaderTradeCommand

__all__ = [
    "CancelCopyOrderCommand",
    "ConfirmCopyOrderFillCommand",
    "ExecuteCopyOrderCommand",
    "FlushDelayedCopyOrdersCommand",
    "RemoveGuardrailCommand",
    "ReplicateLeaderTradeCommand",
    "ScheduleDelayedCopyCommand",
    "SetGuardrailCommand",
]
