"""Guardrail value object - per-follower maximum allocation rule."""

from dataclasses import dataclass
from decimal import Decimal

from copy_engine.domain.shared import ValueObject

from ..exceptions import InvalidGuardrailError

MAX_GUARDRAIL_PCT = Decimal("1")


@dataclass(frozen=True)
class Guardrail(ValueObject):
    """Maximum fraction of NAV a follower allows per order.

    ``symbol=None`` is a global cap that applies to every symbol.

    Raises:
        InvalidGuardrailError: If max_allocation_pct is outside (0, 1].
    """

    follower_id: int
    max_allocation_pct: Decimal
    symbol: str | None = None

    def __post_init__(self) -> None:
        pct = Decimal(str(self.max_allocation_pct))
        if not (Decimal("0") < pct <= MAX_GUARDRAIL_PCT):
            raise InvalidGuardrailError(
                "Guardrail max allocation must be within (0, 1]",
                follower_id=self.follower_id,
                symbol=self.symbol,
                max_allocation_pct=str(pct),
            )
        object.__setattr__(self, "max_allocation_pct", pct)
        if self.symbol is not None:
            symbol = self.symbol.strip().upper()
            object.__setattr__(self, "symbol", symbol or None)

    @property
    def is_global(self) -> bool:
        return self.symbol is None

    def applies_to(self, symbol: str) -> bool:
        """Check whether this guardrail constrains orders in ``symbol``."""
        return self.is_global or self.symbol == symbol.upper()
