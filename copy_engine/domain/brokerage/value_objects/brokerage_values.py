"""Value objects returned by the brokerage integration."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from copy_engine.domain.shared import ValueObject


class ConnectionStatus(str, Enum):
    """Brokerage connection status."""

    ACTIVE = "ACTIVE"
    DISABLED = "DISABLED"
    ERROR = "ERROR"


@dataclass(frozen=True)
class BrokerConnection(ValueObject):
    """A user's authorised link to a brokerage.

    ``authorization_id`` identifies the user on every brokerage call.
    """

    id: int
    user_id: int
    authorization_id: str
    status: ConnectionStatus = ConnectionStatus.ACTIVE
    brokerage_name: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == ConnectionStatus.ACTIVE


@dataclass(frozen=True)
class OrderReceipt(ValueObject):
    """Brokerage acknowledgement of a submitted order."""

    order_id: str
    symbol: str
    side: str
    quantity: int


@dataclass(frozen=True)
class Holding(ValueObject):
    symbol: str
    quantity: Decimal
    market_value: Decimal
    currency: str = "USD"


@dataclass(frozen=True)
class AccountHoldings(ValueObject):
    """Holdings of one brokerage account."""

    account_id: str
    account_number: str
    holdings: tuple[Holding, ...] = field(default_factory=tuple)

    @property
    def market_value(self) -> Decimal:
        return sum((h.market_value for h in self.holdings), Decimal("0"))


@dataclass(frozen=True)
class BrokerActivity(ValueObject):
    """A fill reported by the brokerage activity feed."""

    id: str
    account_id: str
    symbol: str
    side: str
    quantity: Decimal
    price: Decimal
    trade_date: datetime
