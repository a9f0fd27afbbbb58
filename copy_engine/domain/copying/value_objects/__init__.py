"""Value objects for the Copying bounded context."""

from .enums import CopyOrderStatus, DelayedCopyStatus, PositionSizingStrategy, TradeSide
from .guardrail import Guardrail
from .risk import PortfolioSnapshot, RiskDecision, RiskLimits
from .subscription import FollowerSubscription
from .trade_fill import LeaderTradeEvent, TradeFill

__all__ = [
    "CopyOrderStatus",
    "DelayedCopyStatus",
    "PositionSizingStrategy",
    "TradeSide",
    "Guardrail",
    "PortfolioSnapshot",
    "RiskDecision",
    "RiskLimits",
    "FollowerSubscription",
    "LeaderTradeEvent",
    "TradeFill",
]
