"""Value objects consumed and produced by the risk validator."""

from dataclasses import dataclass, field
from decimal import Decimal

from copy_engine.domain.shared import ValueObject, validate_value_object


@dataclass(frozen=True)
class PortfolioSnapshot(ValueObject):
    """Point-in-time view of a follower's portfolio.

    Attributes:
        follower_id: Follower the snapshot belongs to.
        nav: Net asset value (sum of holding market values).
        positions: Market value per symbol.
        daily_realized_pnl: Realized P&L of fills since local midnight.
    """

    follower_id: int
    nav: Decimal
    positions: dict[str, Decimal] = field(default_factory=dict)
    daily_realized_pnl: Decimal = Decimal("0")

    @property
    def position_count(self) -> int:
        return sum(1 for value in self.positions.values() if value > 0)

    def symbol_allocation(self, symbol: str) -> Decimal:
        """Fraction of NAV already held in ``symbol``."""
        if self.nav <= 0:
            return Decimal("0")
        return self.positions.get(symbol.upper(), Decimal("0")) / self.nav

    @property
    def daily_loss_pct(self) -> Decimal:
        """Realized loss today as a fraction of NAV (0 when in profit)."""
        if self.nav <= 0:
            return Decimal("0")
        return max(Decimal("0"), -self.daily_realized_pnl) / self.nav


@dataclass(frozen=True)
class RiskLimits(ValueObject):
    """Follower-independent risk limits."""

    max_single_position_pct: Decimal = Decimal("0.25")
    max_symbol_concentration_pct: Decimal = Decimal("0.30")
    max_daily_loss_pct: Decimal = Decimal("0.05")

    def __post_init__(self) -> None:
        for name in (
            "max_single_position_pct",
            "max_symbol_concentration_pct",
            "max_daily_loss_pct",
        ):
            value = getattr(self, name)
            validate_value_object(
                Decimal("0") < value <= Decimal("1"),
                f"{name} must be within (0, 1]",
            )


@dataclass(frozen=True)
class RiskDecision(ValueObject):
    """Outcome of a risk check.

    ``adjusted_size`` is the largest fraction that would pass the failing
    rule, when such a size exists.
    """

    allowed: bool
    reason: str | None = None
    adjusted_size: Decimal | None = None

    @classmethod
    def approve(cls) -> "RiskDecision":
        return cls(allowed=True)

    @classmethod
    def deny(
        cls, reason: str, adjusted_size: Decimal | None = None
    ) -> "RiskDecision":
        return cls(allowed=False, reason=reason, adjusted_size=adjusted_size)
