"""Copying DTOs."""

from .copy_order_dto import CopyOrderDTO, CopyTradingStatsDTO, DelayedCopyOrderDTO, GuardrailDTO
from .replication_dto import (
    CopyAttemptDTO,
    FlushResultDTO,
    FollowerOutcome,
    FollowerResultDTO,
    ReplicationResultDTO,
)

__all__ = [
    "CopyOrderDTO",
    "CopyTradingStatsDTO",
    "DelayedCopyOrderDTO",
    "GuardrailDTO",
    "CopyAttemptDTO",
    "FlushResultDTO",
    "FollowerOutcome",
    "FollowerResultDTO",
    "ReplicationResultDTO",
]
