"""Application services of the Copying context."""

from .follower_lock import FollowerLock, InMemoryFollowerLock
from .position_sizer import PositionSizer
from .risk_validation import RiskOutcome, RiskValidationService
from .subscription_resolver import SubscriptionResolver

__all__ = [
    "FollowerLock",
    "InMemoryFollowerLock",
    "PositionSizer",
    "RiskOutcome",
    "RiskValidationService",
    "SubscriptionResolver",
]
