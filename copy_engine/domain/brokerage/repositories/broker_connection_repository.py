"""BrokerConnectionRepository Port."""

from abc import ABC, abstractmethod
from typing import Optional

from ..value_objects import BrokerConnection


class BrokerConnectionRepository(ABC):
    """Read access to users' brokerage connections."""

    @abstractmethod
    async def get_active_for_user(self, user_id: int) -> Optional[BrokerConnection]:
        """The user's active connection, most recently created first."""
        pass
