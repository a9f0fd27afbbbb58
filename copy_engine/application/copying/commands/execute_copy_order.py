"""ExecuteCopyOrder Command - turn an approved allocation into an order."""

from dataclasses import dataclass
from decimal import Decimal

from copy_engine.application.shared import Command
from copy_engine.domain.copying.value_objects import TradeSide


@dataclass(frozen=True)
class ExecuteCopyOrderCommand(Command):
    """Command for the Order Execution Coordinator.

    Either ``quantity`` is given (delayed flush), or it is derived as
    ``floor(allocation × follower_nav / fill_price)``.
    """

    follower_id: int
    leader_id: int
    leader_trade_id: int
    account_number: str
    """Leader's account number, passed to the brokerage as routing hint."""

    symbol: str
    side: TradeSide

    fill_price: Decimal | None = None
    """Leader fill price; needed only when the quantity is derived."""

    allocation: Decimal | None = None
    """Approved fraction of follower NAV."""

    follower_nav: Decimal | None = None
    """Follower NAV; loaded from the portfolio store when omitted."""

    quantity: int | None = None
    """Pre-computed share count (skips the allocation math)."""
