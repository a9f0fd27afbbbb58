"""Brokerage value objects."""

from .brokerage_values import (
    AccountHoldings,
    BrokerActivity,
    BrokerConnection,
    ConnectionStatus,
    Holding,
    OrderReceipt,
)

__all__ = [
    "AccountHoldings",
    "BrokerActivity",
    "BrokerConnection",
    "ConnectionStatus",
    "Holding",
    "OrderReceipt",
]
