"""API v1 schemas."""

from .copy_schemas import (
    ConfirmFillRequest,
    CopyOrderResponse,
    CopyTradingStatsResponse,
    DelayedCopyOrderResponse,
    ErrorResponse,
    GuardrailRequest,
    GuardrailResponse,
    LeaderTradeAcceptedResponse,
    LeaderTradeRequest,
    SymbolCount,
)

__all__ = [
    "ConfirmFillRequest",
    "CopyOrderResponse",
    "CopyTradingStatsResponse",
    "DelayedCopyOrderResponse",
    "ErrorResponse",
    "GuardrailRequest",
    "GuardrailResponse",
    "LeaderTradeAcceptedResponse",
    "LeaderTradeRequest",
    "SymbolCount",
]
