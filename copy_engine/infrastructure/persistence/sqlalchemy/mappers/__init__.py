"""Domain ↔ ORM mappers."""

from .account_mapper import (
    BrokerConnectionMapper,
    GuardrailMapper,
    SubscriptionMapper,
    TradeFillMapper,
)
from .copy_order_mapper import CopyOrderMapper, DelayedCopyOrderMapper, as_utc

__all__ = [
    "BrokerConnectionMapper",
    "CopyOrderMapper",
    "DelayedCopyOrderMapper",
    "GuardrailMapper",
    "SubscriptionMapper",
    "TradeFillMapper",
    "as_utc",
]
