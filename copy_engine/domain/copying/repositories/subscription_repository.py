"""SubscriptionRepository Port - read-only view of follower settings."""

from abc import ABC, abstractmethod
from typing import Optional

from ..value_objects import FollowerSubscription


class SubscriptionRepository(ABC):
    """Read access to (leader, follower) copy subscriptions."""

    @abstractmethod
    async def get_for_leader(self, leader_id: int) -> list[FollowerSubscription]:
        """All subscriptions of a leader, enabled or not."""
        pass

    @abstractmethod
    async def get(self, leader_id: int, follower_id: int) -> Optional[FollowerSubscription]:
        pass
