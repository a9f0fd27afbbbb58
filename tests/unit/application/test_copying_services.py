"""Unit tests for PositionSizer, RiskValidationService and SubscriptionResolver."""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from copy_engine.application.copying.services import (
    PositionSizer,
    RiskValidationService,
    SubscriptionResolver,
)
from copy_engine.application.shared import UnitOfWork
from copy_engine.domain.copying.value_objects import (
    FollowerSubscription,
    Guardrail,
    PortfolioSnapshot,
    PositionSizingStrategy,
    RiskLimits,
    TradeSide,
)


@pytest.fixture
def clock(leader_fill_time):
    return lambda: leader_fill_time


class TestPositionSizer:
    @pytest.mark.asyncio
    async def test_percentage_for_new_follower(self, uow_factory, clock):
        sizer = PositionSizer(clock=clock)

        proposal = await sizer.propose(
            uow_factory(),
            follower_id=7,
            leader_id=1,
            symbol="AAPL",
            default=Decimal("0.05"),
            experience_tier=3,
        )

        assert proposal.strategy == PositionSizingStrategy.PERCENTAGE
        assert proposal.fraction == Decimal("0.04")
        assert not proposal.fell_back

    @pytest.mark.asyncio
    async def test_momentum_reads_recent_symbol_fills(
        self, store, uow_factory, clock, leader_fill_time
    ):
        # Arrange: AAPL up 12% over the last five fills
        for i, price in enumerate(["100", "103", "105", "108", "112"]):
            store.add_trade(
                user_id=50 + i,
                symbol="AAPL",
                side=TradeSide.BUY,
                quantity=Decimal("1"),
                price=Decimal(price),
                filled_at=leader_fill_time - timedelta(days=5 - i),
            )
        sizer = PositionSizer(clock=clock)

        # Act
        proposal = await sizer.propose(
            uow_factory(),
            follower_id=7,
            leader_id=1,
            symbol="AAPL",
            default=Decimal("0.05"),
            experience_tier=20,
        )

        # Assert
        assert proposal.strategy == PositionSizingStrategy.MOMENTUM
        assert proposal.fraction == Decimal("0.08")

    @pytest.mark.asyncio
    async def test_risk_parity_uses_snapshot(self, uow_factory, clock):
        sizer = PositionSizer(clock=clock)
        snapshot = PortfolioSnapshot(
            follower_id=7,
            nav=Decimal("30000"),
            positions={"AAPL": Decimal("10000"), "MSFT": Decimal("10000"), "TSLA": Decimal("10000")},
        )

        proposal = await sizer.propose(
            uow_factory(),
            follower_id=7,
            leader_id=1,
            symbol="AAPL",
            default=Decimal("0.05"),
            experience_tier=60,
            snapshot=snapshot,
        )

        assert proposal.strategy == PositionSizingStrategy.RISK_PARITY
        assert proposal.fraction == Decimal("0.25")

    @pytest.mark.asyncio
    async def test_failing_history_falls_back_to_safe_default(self, clock):
        """Test: Kelly cannot load history → 0.05 instead of an error."""
        uow = MagicMock(spec=UnitOfWork)
        uow.trade_history.get_user_trades = AsyncMock(side_effect=RuntimeError("db down"))
        sizer = PositionSizer(clock=clock)

        proposal = await sizer.propose(
            uow,
            follower_id=7,
            leader_id=1,
            symbol="AAPL",
            default=Decimal("0.02"),
            experience_tier=150,
        )

        assert proposal.strategy == PositionSizingStrategy.KELLY
        assert proposal.fraction == Decimal("0.05")
        assert proposal.fell_back

    @pytest.mark.asyncio
    async def test_percentage_fallback_is_capped(self, uow_factory, clock, monkeypatch):
        """Test: A failing PERCENTAGE sizing never returns more than 0.05."""
        # Arrange
        def broken(default):
            raise ArithmeticError("bad allocation")

        monkeypatch.setattr(
            "copy_engine.application.copying.services.position_sizer.percentage_fraction",
            broken,
        )
        sizer = PositionSizer(clock=clock)

        # Act
        proposal = await sizer.propose(
            uow_factory(),
            follower_id=7,
            leader_id=1,
            symbol="AAPL",
            default=Decimal("0.12"),
            experience_tier=3,
        )

        # Assert
        assert proposal.strategy == PositionSizingStrategy.PERCENTAGE
        assert proposal.fraction == Decimal("0.05")
        assert proposal.fell_back


class TestRiskValidationService:
    @pytest.mark.asyncio
    async def test_load_snapshot(self, store, uow_factory, clock, leader_fill_time):
        # Arrange
        store.add_account(7, {"AAPL": Decimal("5000"), "MSFT": Decimal("15000")})
        store.add_trade(
            user_id=7,
            symbol="AAPL",
            side=TradeSide.SELL,
            quantity=Decimal("1"),
            price=Decimal("150"),
            filled_at=leader_fill_time - timedelta(hours=1),
        )
        store.add_trade(
            user_id=7,
            symbol="AAPL",
            side=TradeSide.BUY,
            quantity=Decimal("1"),
            price=Decimal("400"),
            filled_at=leader_fill_time - timedelta(days=1),
        )
        service = RiskValidationService(clock=clock)

        # Act
        snapshot = await service.load_snapshot(uow_factory(), 7)

        # Assert
        assert snapshot.nav == Decimal("20000")
        assert snapshot.positions["AAPL"] == Decimal("5000")
        # Yesterday's fill is not part of today's P&L
        assert snapshot.daily_realized_pnl == Decimal("150")

    @pytest.mark.asyncio
    async def test_unknown_follower_has_no_snapshot(self, uow_factory, clock):
        service = RiskValidationService(clock=clock)

        assert await service.load_snapshot(uow_factory(), 404) is None

    @pytest.mark.asyncio
    async def test_adjusted_size_is_retried_once(self, uow_factory):
        """Test: 0.30 denied → 0.25 validated again and approved."""
        service = RiskValidationService()
        snapshot = PortfolioSnapshot(follower_id=7, nav=Decimal("20000"))

        outcome = await service.arbitrate(uow_factory(), snapshot, 7, "AAPL", Decimal("0.30"))

        assert outcome.allowed
        assert outcome.adjusted
        assert outcome.approved_size == Decimal("0.25")

    @pytest.mark.asyncio
    async def test_adjusted_size_denied_again_is_final(self, store, uow_factory):
        """Test: Adjusted size that still fails is not adjusted a second time."""
        # Arrange: 0.30 → single cap 0.25 → guardrail 0.10 would fail again
        store.guardrails.append(Guardrail(follower_id=7, max_allocation_pct=Decimal("0.10")))
        service = RiskValidationService()
        snapshot = PortfolioSnapshot(follower_id=7, nav=Decimal("20000"))

        # Act
        outcome = await service.arbitrate(uow_factory(), snapshot, 7, "AAPL", Decimal("0.30"))

        # Assert
        assert not outcome.allowed
        assert outcome.adjusted
        assert outcome.approved_size is None

    @pytest.mark.asyncio
    async def test_auto_apply_disabled(self, uow_factory):
        service = RiskValidationService(auto_apply_adjusted_size=False)
        snapshot = PortfolioSnapshot(follower_id=7, nav=Decimal("20000"))

        outcome = await service.arbitrate(uow_factory(), snapshot, 7, "AAPL", Decimal("0.30"))

        assert not outcome.allowed
        assert outcome.decision.adjusted_size == Decimal("0.25")

    @pytest.mark.asyncio
    async def test_custom_limits(self, uow_factory):
        service = RiskValidationService(limits=RiskLimits(max_single_position_pct=Decimal("0.03")))
        snapshot = PortfolioSnapshot(follower_id=7, nav=Decimal("20000"))

        outcome = await service.arbitrate(uow_factory(), snapshot, 7, "AAPL", Decimal("0.04"))

        assert outcome.approved_size == Decimal("0.03")


class TestSubscriptionResolver:
    @pytest.mark.asyncio
    async def test_only_replicating_subscriptions(self, store, uow_factory):
        store.subscriptions.extend(
            [
                FollowerSubscription(leader_id=1, follower_id=7, auto_copy_enabled=True),
                FollowerSubscription(leader_id=1, follower_id=8, auto_copy_enabled=False),
                FollowerSubscription(
                    leader_id=1, follower_id=9, auto_copy_enabled=True, paused=True
                ),
                FollowerSubscription(
                    leader_id=1, follower_id=10, auto_copy_enabled=True, deferred_mode=True
                ),
                FollowerSubscription(leader_id=2, follower_id=11, auto_copy_enabled=True),
            ]
        )

        active = await SubscriptionResolver().resolve(uow_factory(), 1)

        assert [s.follower_id for s in active] == [7, 10]
