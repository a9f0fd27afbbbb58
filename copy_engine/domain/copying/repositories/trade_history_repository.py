"""TradeHistoryRepository Port - read-only brokerage fills."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..value_objects import LeaderTradeEvent, TradeFill


class TradeHistoryRepository(ABC):
    """Fills synchronised from brokerages, for every account.

    Populated by the holdings/activity sync outside this service.
    """

    @abstractmethod
    async def find_leader_trade(self, event: LeaderTradeEvent) -> Optional[TradeFill]:
        """Persisted fill that matches a leader trade event."""
        pass

    @abstractmethod
    async def get_user_trades(
        self, user_id: int, since: datetime, symbol: str | None = None
    ) -> list[TradeFill]:
        """A user's fills since ``since``, oldest first."""
        pass

    @abstractmethod
    async def get_recent_symbol_trades(
        self, symbol: str, since: datetime, limit: int
    ) -> list[TradeFill]:
        """Most recent fills in ``symbol`` across all accounts, newest first."""
        pass
