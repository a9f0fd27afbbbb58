"""BrokeragePort - interface of the brokerage integration.

Every call is made on behalf of one user, identified by the authorization ID
of their brokerage connection.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from ..value_objects import AccountHoldings, BrokerActivity, OrderReceipt


class BrokeragePort(ABC):
    """Port for order submission and account queries.

    Implementations:
    - SnapTradeAdapter (HTTP)
    - ResilientBrokerage (retry + circuit breaker around another port)
    """

    @abstractmethod
    async def place_order(
        self,
        authorization_id: str,
        account_number: str,
        symbol: str,
        side: str,
        quantity: int,
    ) -> OrderReceipt:
        """Submit a market order.

        Args:
            authorization_id: Brokerage authorization of the order owner.
            account_number: Account routing hint.
            symbol: Ticker.
            side: "BUY" or "SELL".
            quantity: Whole shares.

        Returns:
            OrderReceipt with the brokerage order ID.

        Raises:
            BrokerageError: Any failure; transient subclasses may be retried.
        """
        pass

    @abstractmethod
    async def get_holdings(self, authorization_id: str) -> list[AccountHoldings]:
        """Per-account holdings (NAV source)."""
        pass

    @abstractmethod
    async def get_activities(
        self, authorization_id: str, since: datetime | None = None
    ) -> list[BrokerActivity]:
        """Account fills, optionally only those after ``since``."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None
