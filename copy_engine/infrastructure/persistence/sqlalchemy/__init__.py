"""SQLAlchemy persistence layer."""

from .database import create_engine, create_session_factory
from .models import Base
from .repositories import (
    SQLAlchemyBrokerConnectionRepository,
    SQLAlchemyCopyOrderRepository,
    SQLAlchemyDelayedCopyOrderRepository,
    SQLAlchemyGuardrailRepository,
    SQLAlchemyPortfolioRepository,
    SQLAlchemySubscriptionRepository,
    SQLAlchemyTradeHistoryRepository,
)
from .unit_of_work import SQLAlchemyUnitOfWork, create_unit_of_work, unit_of_work_factory

__all__ = [
    # ORM
    "Base",
    "create_engine",
    "create_session_factory",
    # Repositories
    "SQLAlchemyBrokerConnectionRepository",
    "SQLAlchemyCopyOrderRepository",
    "SQLAlchemyDelayedCopyOrderRepository",
    "SQLAlchemyGuardrailRepository",
    "SQLAlchemyPortfolioRepository",
    "SQLAlchemySubscriptionRepository",
    "SQLAlchemyTradeHistoryRepository",
    # Unit of Work
    "SQLAlchemyUnitOfWork",
    "create_unit_of_work",
    "unit_of_work_factory",
]
