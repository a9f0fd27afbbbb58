"""ReplicateLeaderTrade Command - fan a leader fill out to followers.

This is the entry point of the whole replication pipeline.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from copy_engine.application.shared import Command
from copy_engine.domain.copying.value_objects import LeaderTradeEvent, TradeSide


@dataclass(frozen=True)
class ReplicateLeaderTradeCommand(Command):
    """Command carrying a LeaderTradeEvent.

    Example:
        >>> command = ReplicateLeaderTradeCommand(
        ...     leader_id=1,
        ...     broker_connection_id=10,
        ...     account_number="ACC-1",
        ...     symbol="AAPL",
        ...     side="BUY",
        ...     quantity=25,
        ...     fill_price=Decimal("200"),
        ...     filled_at=datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc),
        ... )
        >>> result = await handler.handle(command)
    """

    leader_id: int
    broker_connection_id: int
    account_number: str
    symbol: str
    side: str
    quantity: int
    fill_price: Decimal
    filled_at: datetime

    def to_event(self) -> LeaderTradeEvent:
        """Validate and convert to the domain event.

        Raises:
            InvalidLeaderTradeError: If quantity or price is not positive.
        """
        return LeaderTradeEvent(
            leader_id=self.leader_id,
            broker_connection_id=self.broker_connection_id,
            account_number=self.account_number,
            symbol=self.symbol,
            side=TradeSide(self.side.upper()),
            quantity=self.quantity,
            fill_price=Decimal(str(self.fill_price)),
            filled_at=self.filled_at,
        )
