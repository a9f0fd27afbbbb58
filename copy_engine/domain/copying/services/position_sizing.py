"""
Position Sizing Engine (pure part)

Turns a follower's experience tier and the relevant trade history into a
target allocation, expressed as a fraction of the follower's NAV.

Strategy ladder (highest tier that applies wins):
1. PERCENTAGE  (< 10 copies)   - leader's own allocation, scaled and capped
2. MOMENTUM    (10-49 copies)  - recent price momentum in the symbol
3. RISK_PARITY (50-99 copies)  - equal weight across held positions
4. KELLY       (100+ copies)   - Kelly criterion over leader round trips

Kelly Formula:
    f = (b·p - q) / b
    where:
    - p = win rate, q = 1 - p
    - b = average win / average loss

All functions here are deterministic and side-effect free. Loading the
history and failing open on errors happens in the application layer.
"""

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal
from typing import Sequence

from ..value_objects import PositionSizingStrategy, TradeFill, TradeSide

# Fallback used whenever a strategy cannot produce a number
SAFE_DEFAULT_FRACTION = Decimal("0.05")

# PERCENTAGE
PERCENTAGE_SCALE = Decimal("0.8")
PERCENTAGE_CAP = Decimal("0.05")

# MOMENTUM
MOMENTUM_LOOKBACK_DAYS = 30
MOMENTUM_MAX_TRADES = 20
MOMENTUM_MIN_TRADES = 5
# (threshold, allocation) checked top to bottom
MOMENTUM_UP_BANDS = (
    (Decimal("0.10"), Decimal("0.08")),
    (Decimal("0.05"), Decimal("0.06")),
)
MOMENTUM_DOWN_BANDS = (
    (Decimal("-0.10"), Decimal("0.02")),
    (Decimal("-0.05"), Decimal("0.03")),
)

# RISK_PARITY
NEW_PORTFOLIO_FRACTION = Decimal("0.10")

# KELLY
KELLY_LOOKBACK_DAYS = 90
KELLY_MIN_TRADES = 10
KELLY_MIN_FRACTION = Decimal("0.01")
KELLY_MAX_FRACTION = Decimal("0.20")

# Experience tier ladder, highest threshold first
STRATEGY_TIERS: tuple[tuple[int, PositionSizingStrategy], ...] = (
    (100, PositionSizingStrategy.KELLY),
    (50, PositionSizingStrategy.RISK_PARITY),
    (10, PositionSizingStrategy.MOMENTUM),
    (0, PositionSizingStrategy.PERCENTAGE),
)


@dataclass(frozen=True)
class AllocationProposal:
    """Sizing engine output: the chosen strategy and its fraction."""

    strategy: PositionSizingStrategy
    fraction: Decimal
    fell_back: bool = False


def resolve_strategy(experience_tier: int) -> PositionSizingStrategy:
    """Pick the sizing strategy for a follower's replication count.

    Args:
        experience_tier: Number of copy orders the follower has had.

    Returns:
        PositionSizingStrategy for that tier.

    Example:
        >>> resolve_strategy(3)
        <PositionSizingStrategy.PERCENTAGE: 'percentage'>
        >>> resolve_strategy(120)
        <PositionSizingStrategy.KELLY: 'kelly'>
    """
    for threshold, strategy in STRATEGY_TIERS:
        if experience_tier >= threshold:
            return strategy
    return PositionSizingStrategy.PERCENTAGE


def default_fraction(trade_notional: Decimal, leader_nav: Decimal) -> Decimal:
    """Leader's own allocation: trade notional over leader NAV."""
    if leader_nav <= 0:
        return Decimal("0")
    return trade_notional / leader_nav


def percentage_fraction(default: Decimal) -> Decimal:
    """Scale the leader's allocation by 0.8 and cap at 5%."""
    return min(default * PERCENTAGE_SCALE, PERCENTAGE_CAP)


def momentum_fraction(trades: Sequence[TradeFill]) -> Decimal:
    """Map simple price momentum of recent fills to an allocation.

    Args:
        trades: Fills in the symbol within the lookback window, any order.

    Returns:
        Allocation fraction; SAFE_DEFAULT_FRACTION with too little data.
    """
    recent = sorted(trades, key=lambda t: t.filled_at, reverse=True)[:MOMENTUM_MAX_TRADES]
    if len(recent) < MOMENTUM_MIN_TRADES:
        return SAFE_DEFAULT_FRACTION

    newest, oldest = recent[0].price, recent[-1].price
    if oldest <= 0:
        return SAFE_DEFAULT_FRACTION

    momentum = (newest - oldest) / oldest

    for threshold, allocation in MOMENTUM_UP_BANDS:
        if momentum > threshold:
            return allocation
    for threshold, allocation in MOMENTUM_DOWN_BANDS:
        if momentum < threshold:
            return allocation
    return SAFE_DEFAULT_FRACTION


def risk_parity_fraction(position_count: int) -> Decimal:
    """Equal risk contribution approximation: 1 / (positions + 1)."""
    if position_count <= 0:
        return NEW_PORTFOLIO_FRACTION
    return Decimal("1") / Decimal(position_count + 1)


def kelly_fraction(trades: Sequence[TradeFill]) -> Decimal:
    """Kelly criterion over consecutive BUY → SELL round trips.

    P&L is per share, so fill sizes do not weight the result. Win rate and
    average loss are taken over every consecutive pair of the history, so
    pairs that are not round trips dilute both.

    Args:
        trades: Leader fills in the symbol within the lookback window.

    Returns:
        Fraction clamped to [0.01, 0.20], or SAFE_DEFAULT_FRACTION when the
        history is too short or has no wins or no losses.
    """
    if len(trades) < KELLY_MIN_TRADES:
        return SAFE_DEFAULT_FRACTION

    ordered = sorted(trades, key=lambda t: t.filled_at)
    pairs = len(ordered) - 1

    wins = 0
    total_win = Decimal("0")
    total_loss = Decimal("0")

    for previous, current in zip(ordered, ordered[1:]):
        if previous.side != TradeSide.BUY or current.side != TradeSide.SELL:
            continue
        pnl = current.price - previous.price
        if pnl > 0:
            wins += 1
            total_win += pnl
        else:
            total_loss += abs(pnl)

    losses = pairs - wins
    if wins == 0 or losses <= 0 or total_loss == 0:
        return SAFE_DEFAULT_FRACTION

    win_rate = Decimal(wins) / Decimal(pairs)
    avg_win = total_win / wins
    avg_loss = total_loss / losses

    b = avg_win / avg_loss
    q = Decimal("1") - win_rate
    kelly = (b * win_rate - q) / b

    return max(KELLY_MIN_FRACTION, min(KELLY_MAX_FRACTION, kelly))


def quantity_for_allocation(
    allocation: Decimal, nav: Decimal, fill_price: Decimal
) -> int:
    """Whole shares for an allocation: floor(allocation × NAV / price).

    Returns:
        Share count, 0 when any input is non-positive.

    Example:
        >>> quantity_for_allocation(Decimal("0.04"), Decimal("20000"), Decimal("200"))
        4
    """
    if allocation <= 0 or nav <= 0 or fill_price <= 0:
        return 0
    shares = (allocation * nav / fill_price).to_integral_value(rounding=ROUND_FLOOR)
    return int(shares)
