"""Position Sizer - loads history and runs the sizing strategies.

The strategy math lives in ``domain.copying.services.position_sizing``;
this service only feeds it data and applies the fail-open rule.
"""

import logging
from datetime import timedelta
from decimal import Decimal

from copy_engine.application.shared import Clock, UnitOfWork, utcnow
from copy_engine.domain.copying.services import (
    KELLY_LOOKBACK_DAYS,
    MOMENTUM_LOOKBACK_DAYS,
    MOMENTUM_MAX_TRADES,
    SAFE_DEFAULT_FRACTION,
    AllocationProposal,
    kelly_fraction,
    momentum_fraction,
    percentage_fraction,
    resolve_strategy,
    risk_parity_fraction,
)
from copy_engine.domain.copying.value_objects import PortfolioSnapshot, PositionSizingStrategy

logger = logging.getLogger(__name__)


class PositionSizer:
    """Proposes an allocation fraction for one follower and one leader trade.

    Example:
        >>> sizer = PositionSizer()
        >>> proposal = await sizer.propose(
        ...     uow,
        ...     follower_id=7,
        ...     leader_id=1,
        ...     symbol="AAPL",
        ...     default=Decimal("0.05"),
        ...     experience_tier=3,
        ... )
        >>> proposal.fraction
        Decimal('0.040')
    """

    def __init__(self, clock: Clock = utcnow) -> None:
        self._clock = clock

    async def propose(
        self,
        uow: UnitOfWork,
        follower_id: int,
        leader_id: int,
        symbol: str,
        default: Decimal,
        experience_tier: int,
        snapshot: PortfolioSnapshot | None = None,
    ) -> AllocationProposal:
        """Pick the strategy for the tier and compute its fraction.

        Args:
            uow: Open Unit of Work for history reads.
            follower_id: Follower being sized.
            leader_id: Leader whose trade is copied.
            symbol: Traded symbol.
            default: Leader's own allocation (notional / leader NAV).
            experience_tier: Follower's copy order count.
            snapshot: Follower portfolio, if already loaded.

        Returns:
            AllocationProposal. Never raises: on any error PERCENTAGE falls
            back to ``default`` capped at SAFE_DEFAULT_FRACTION, the others
            to SAFE_DEFAULT_FRACTION.
        """
        strategy = resolve_strategy(experience_tier)

        try:
            fraction = await self._compute(
                uow, strategy, follower_id, leader_id, symbol, default, snapshot
            )
        except Exception as e:
            fallback = SAFE_DEFAULT_FRACTION
            if strategy == PositionSizingStrategy.PERCENTAGE:
                fallback = min(default, SAFE_DEFAULT_FRACTION)
            logger.warning(
                "position_sizing.strategy_failed",
                extra={
                    "follower_id": follower_id,
                    "strategy": strategy.value,
                    "fallback": str(fallback),
                    "error": str(e),
                },
                exc_info=True,
            )
            return AllocationProposal(strategy=strategy, fraction=fallback, fell_back=True)

        logger.debug(
            "position_sizing.proposed",
            extra={
                "follower_id": follower_id,
                "strategy": strategy.value,
                "tier": experience_tier,
                "fraction": str(fraction),
            },
        )
        return AllocationProposal(strategy=strategy, fraction=fraction)

    async def _compute(
        self,
        uow: UnitOfWork,
        strategy: PositionSizingStrategy,
        follower_id: int,
        leader_id: int,
        symbol: str,
        default: Decimal,
        snapshot: PortfolioSnapshot | None,
    ) -> Decimal:
        now = self._clock()

        if strategy == PositionSizingStrategy.MOMENTUM:
            trades = await uow.trade_history.get_recent_symbol_trades(
                symbol,
                since=now - timedelta(days=MOMENTUM_LOOKBACK_DAYS),
                limit=MOMENTUM_MAX_TRADES,
            )
            return momentum_fraction(trades)

        if strategy == PositionSizingStrategy.RISK_PARITY:
            if snapshot is None:
                positions = await uow.portfolios.get_positions(follower_id)
                count = sum(1 for value in positions.values() if value > 0)
            else:
                count = snapshot.position_count
            return risk_parity_fraction(count)

        if strategy == PositionSizingStrategy.KELLY:
            trades = await uow.trade_history.get_user_trades(
                leader_id,
                since=now - timedelta(days=KELLY_LOOKBACK_DAYS),
                symbol=symbol,
            )
            return kelly_fraction(trades)

        return percentage_fraction(default)
