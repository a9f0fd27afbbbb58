"""Repository ports of the Copying bounded context."""

from .copy_order_repository import CopyOrderRepository
from .delayed_copy_order_repository import DelayedCopyOrderRepository
from .guardrail_repository import GuardrailRepository
from .portfolio_repository import PortfolioRepository
from .subscription_repository import SubscriptionRepository
from .trade_history_repository import TradeHistoryRepository

__all__ = [
    "CopyOrderRepository",
    "DelayedCopyOrderRepository",
    "GuardrailRepository",
    "PortfolioRepository",
    "SubscriptionRepository",
    "TradeHistoryRepository",
]
