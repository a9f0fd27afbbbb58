"""Risk Validator - pure allocation decision over a portfolio snapshot.

Checks, in order:
1. Unknown follower → deny
2. Daily loss above limit → deny, no adjusted size (supersedes the rest)
3. Single position cap → deny, adjusted to the cap
4. Symbol concentration cap → deny, adjusted to the remaining room
5. Follower guardrails (symbol + global) → deny, adjusted to the tightest
6. Approve
"""

from decimal import Decimal
from typing import Optional, Sequence

from ..value_objects import Guardrail, PortfolioSnapshot, RiskDecision, RiskLimits

DEFAULT_RISK_LIMITS = RiskLimits()

REASON_UNKNOWN_FOLLOWER = "follower not found"
REASON_DAILY_LOSS = "daily loss limit exceeded"
REASON_SINGLE_POSITION = "exceeds maximum single-position allocation"
REASON_CONCENTRATION = "would exceed symbol concentration limit"
REASON_GUARDRAIL = "exceeds guardrail allocation limit"


def effective_guardrail_cap(
    guardrails: Sequence[Guardrail], symbol: str
) -> Optional[Decimal]:
    """Tightest cap among the symbol guardrail and the global guardrail."""
    caps = [g.max_allocation_pct for g in guardrails if g.applies_to(symbol)]
    return min(caps) if caps else None


def validate_allocation(
    snapshot: Optional[PortfolioSnapshot],
    symbol: str,
    proposed: Decimal,
    guardrails: Sequence[Guardrail] = (),
    limits: RiskLimits = DEFAULT_RISK_LIMITS,
) -> RiskDecision:
    """Approve, deny or shrink a proposed allocation.

    Args:
        snapshot: Follower portfolio, None when the follower is unknown.
        symbol: Symbol being copied.
        proposed: Proposed fraction of NAV.
        guardrails: Follower guardrails (any symbol; filtered here).
        limits: Platform risk limits.

    Returns:
        RiskDecision. Never raises for business outcomes.

    Example:
        >>> snapshot = PortfolioSnapshot(follower_id=7, nav=Decimal("20000"))
        >>> validate_allocation(snapshot, "AAPL", Decimal("0.30"))
        RiskDecision(allowed=False, reason='exceeds maximum single-position allocation', adjusted_size=Decimal('0.25'))
    """
    if snapshot is None:
        return RiskDecision.deny(REASON_UNKNOWN_FOLLOWER)

    if snapshot.daily_loss_pct > limits.max_daily_loss_pct:
        return RiskDecision.deny(REASON_DAILY_LOSS)

    if proposed > limits.max_single_position_pct:
        return RiskDecision.deny(
            REASON_SINGLE_POSITION, adjusted_size=limits.max_single_position_pct
        )

    existing = snapshot.symbol_allocation(symbol)
    if existing + proposed > limits.max_symbol_concentration_pct:
        room = limits.max_symbol_concentration_pct - existing
        return RiskDecision.deny(
            REASON_CONCENTRATION, adjusted_size=room if room > 0 else None
        )

    cap = effective_guardrail_cap(guardrails, symbol)
    if cap is not None and proposed > cap:
        return RiskDecision.deny(REASON_GUARDRAIL, adjusted_size=cap)

    return RiskDecision.approve()
