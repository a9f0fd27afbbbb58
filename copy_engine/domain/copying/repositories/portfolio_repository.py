"""PortfolioRepository Port - read-only NAV and holdings source."""

from abc import ABC, abstractmethod
from decimal import Decimal


class PortfolioRepository(ABC):
    """Holdings view maintained by the brokerage sync.

    NAV is the sum of market value of all current holdings.
    """

    @abstractmethod
    async def account_exists(self, user_id: int) -> bool:
        pass

    @abstractmethod
    async def get_positions(self, user_id: int) -> dict[str, Decimal]:
        """Market value per symbol across all of the user's accounts."""
        pass

    async def get_nav(self, user_id: int) -> Decimal:
        positions = await self.get_positions(user_id)
        return sum(positions.values(), Decimal("0"))
