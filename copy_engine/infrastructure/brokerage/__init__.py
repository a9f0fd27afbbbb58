"""Brokerage infrastructure - adapters, retry and circuit breaking."""

from .adapters import SnapTradeAdapter
from .resilient_brokerage import ResilientBrokerage

__all__ = ["ResilientBrokerage", "SnapTradeAdapter"]
