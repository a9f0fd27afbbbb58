"""SQLAlchemy repository implementations."""

from .account_repositories import (
    SQLAlchemyBrokerConnectionRepository,
    SQLAlchemyPortfolioRepository,
    SQLAlchemyTradeHistoryRepository,
)
from .copy_order_repository import SQLAlchemyCopyOrderRepository
from .delayed_copy_order_repository import SQLAlchemyDelayedCopyOrderRepository
from .follower_repositories import SQLAlchemyGuardrailRepository, SQLAlchemySubscriptionRepository

__all__ = [
    "SQLAlchemyBrokerConnectionRepository",
    "SQLAlchemyCopyOrderRepository",
    "SQLAlchemyDelayedCopyOrderRepository",
    "SQLAlchemyGuardrailRepository",
    "SQLAlchemyPortfolioRepository",
    "SQLAlchemySubscriptionRepository",
    "SQLAlchemyTradeHistoryRepository",
]
