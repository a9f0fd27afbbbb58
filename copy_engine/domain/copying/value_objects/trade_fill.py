"""Trade value objects: the incoming leader event and historical fills."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from copy_engine.domain.shared import ValueObject

from ..exceptions import InvalidLeaderTradeError
from .enums import TradeSide


@dataclass(frozen=True)
class LeaderTradeEvent(ValueObject):
    """A confirmed fill on a leader account, produced once upstream.

    Example:
        >>> event = LeaderTradeEvent(
        ...     leader_id=1,
        ...     broker_connection_id=10,
        ...     account_number="ACC-1",
        ...     symbol="AAPL",
        ...     side=TradeSide.BUY,
        ...     quantity=25,
        ...     fill_price=Decimal("200"),
        ...     filled_at=datetime.now(timezone.utc),
        ... )
        >>> event.notional
        Decimal('5000')
    """

    leader_id: int
    broker_connection_id: int
    account_number: str
    symbol: str
    side: TradeSide
    quantity: int
    fill_price: Decimal
    filled_at: datetime

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise InvalidLeaderTradeError(
                "Leader trade quantity must be positive",
                quantity=self.quantity,
            )
        if self.fill_price <= 0:
            raise InvalidLeaderTradeError(
                "Leader trade fill price must be positive",
                fill_price=str(self.fill_price),
            )
        if not self.symbol or not self.symbol.strip():
            raise InvalidLeaderTradeError("Leader trade symbol is required")

        # Frozen dataclass - normalise through object.__setattr__
        object.__setattr__(self, "symbol", self.symbol.strip().upper())
        object.__setattr__(self, "side", TradeSide(self.side))

    @property
    def notional(self) -> Decimal:
        """Trade value in account currency."""
        return self.fill_price * self.quantity


@dataclass(frozen=True)
class TradeFill(ValueObject):
    """A persisted fill of any account (leader or follower).

    Used as the leader trade record behind a LeaderTradeEvent and as the
    history consumed by sizing and daily P&L.
    """

    id: int
    user_id: int
    symbol: str
    side: TradeSide
    quantity: Decimal
    price: Decimal
    filled_at: datetime
    broker_connection_id: int | None = None
    account_number: str | None = None

    @property
    def cash_flow(self) -> Decimal:
        """Signed cash flow: sells bring cash in, buys take it out."""
        value = self.quantity * self.price
        return value if self.side == TradeSide.SELL else -value
