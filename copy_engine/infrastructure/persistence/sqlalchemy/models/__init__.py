"""SQLAlchemy ORM models."""

from .account_model import BrokerConnectionModel, HoldingModel, TradeModel, UserModel
from .base import Base, BigIntId
from .copy_order_model import CopyOrderModel, DelayedCopyOrderModel
from .follower_model import CopyGuardrailModel, CopySubscriptionModel

__all__ = [
    "Base",
    "BigIntId",
    "BrokerConnectionModel",
    "CopyGuardrailModel",
    "CopyOrderModel",
    "CopySubscriptionModel",
    "DelayedCopyOrderModel",
    "HoldingModel",
    "TradeModel",
    "UserModel",
]
