"""Risk Validation Service - snapshot loading and adjusted-size arbitration."""

import logging
from dataclasses import dataclass
from datetime import timezone, tzinfo
from decimal import Decimal
from typing import Optional

from copy_engine.application.shared import Clock, UnitOfWork, utcnow
from copy_engine.domain.copying.services import (
    DEFAULT_RISK_LIMITS,
    start_of_local_day,
    validate_allocation,
)
from copy_engine.domain.copying.value_objects import (
    PortfolioSnapshot,
    RiskDecision,
    RiskLimits,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskOutcome:
    """Final word of the risk check.

    ``approved_size`` is the fraction to execute, None when denied.
    ``adjusted`` is True when the validator's adjusted size was retried.
    """

    decision: RiskDecision
    approved_size: Optional[Decimal]
    adjusted: bool = False

    @property
    def allowed(self) -> bool:
        return self.approved_size is not None


class RiskValidationService:
    """Wraps the pure validator with data loading.

    When a proposal is denied with an adjusted size and
    ``auto_apply_adjusted_size`` is on, the adjusted size is validated once
    more and that second decision is final.
    """

    def __init__(
        self,
        limits: RiskLimits = DEFAULT_RISK_LIMITS,
        market_tz: tzinfo = timezone.utc,
        auto_apply_adjusted_size: bool = True,
        clock: Clock = utcnow,
    ) -> None:
        self._limits = limits
        self._market_tz = market_tz
        self._auto_apply_adjusted_size = auto_apply_adjusted_size
        self._clock = clock

    async def load_snapshot(
        self, uow: UnitOfWork, follower_id: int
    ) -> Optional[PortfolioSnapshot]:
        """Follower NAV, positions and today's realized P&L.

        Daily P&L is the cash flow of today's fills: SELL adds qty × price,
        BUY subtracts it.

        Returns:
            PortfolioSnapshot, or None when the follower has no account.
        """
        if not await uow.portfolios.account_exists(follower_id):
            return None

        positions = await uow.portfolios.get_positions(follower_id)
        nav = sum(positions.values(), Decimal("0"))

        since = start_of_local_day(self._clock(), self._market_tz)
        fills = await uow.trade_history.get_user_trades(follower_id, since=since)
        daily_pnl = sum((fill.cash_flow for fill in fills), Decimal("0"))

        return PortfolioSnapshot(
            follower_id=follower_id,
            nav=nav,
            positions=positions,
            daily_realized_pnl=daily_pnl,
        )

    async def arbitrate(
        self,
        uow: UnitOfWork,
        snapshot: Optional[PortfolioSnapshot],
        follower_id: int,
        symbol: str,
        proposed: Decimal,
    ) -> RiskOutcome:
        guardrails = await uow.guardrails.get_for_follower(follower_id) if snapshot else []

        decision = validate_allocation(snapshot, symbol, proposed, guardrails, self._limits)
        if decision.allowed:
            return RiskOutcome(decision=decision, approved_size=proposed)

        if decision.adjusted_size is None or not self._auto_apply_adjusted_size:
            logger.info(
                "risk.denied",
                extra={
                    "follower_id": follower_id,
                    "symbol": symbol,
                    "proposed": str(proposed),
                    "reason": decision.reason,
                },
            )
            return RiskOutcome(decision=decision, approved_size=None)

        adjusted = decision.adjusted_size
        logger.warning(
            "replicate.size_adjusted",
            extra={
                "follower_id": follower_id,
                "symbol": symbol,
                "proposed": str(proposed),
                "adjusted": str(adjusted),
                "reason": decision.reason,
            },
        )

        retry = validate_allocation(snapshot, symbol, adjusted, guardrails, self._limits)
        if retry.allowed:
            return RiskOutcome(decision=retry, approved_size=adjusted, adjusted=True)

        logger.info(
            "risk.denied_after_adjustment",
            extra={
                "follower_id": follower_id,
                "symbol": symbol,
                "adjusted": str(adjusted),
                "reason": retry.reason,
            },
        )
        return RiskOutcome(decision=retry, approved_size=None, adjusted=True)
