"""Copying queries (read operations)."""

from .copy_queries import (
    GetCopyOrdersQuery,
    GetCopyTradingStatsQuery,
    GetDelayedCopyOrdersQuery,
    GetGuardrailsQuery,
)

__all__ = [
    "GetCopyOrdersQuery",
    "GetCopyTradingStatsQuery",
    "GetDelayedCopyOrdersQuery",
    "GetGuardrailsQuery",
]
