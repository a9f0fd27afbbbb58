"""Brokerage adapters."""

from .snaptrade_adapter import SnapTradeAdapter

__all__ = ["SnapTradeAdapter"]
