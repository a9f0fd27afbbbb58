"""Unit tests for copying value objects and the trading calendar."""

from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from copy_engine.domain.copying.exceptions import InvalidGuardrailError, InvalidLeaderTradeError
from copy_engine.domain.copying.services import next_cutoff, start_of_local_day
from copy_engine.domain.copying.value_objects import (
    FollowerSubscription,
    Guardrail,
    LeaderTradeEvent,
    PortfolioSnapshot,
    TradeFill,
    TradeSide,
)

NEW_YORK = ZoneInfo("America/New_York")


class TestLeaderTradeEvent:
    def test_normalises_symbol_and_side(self, sample_leader_trade_data):
        sample_leader_trade_data["symbol"] = " aapl "

        event = LeaderTradeEvent(**sample_leader_trade_data)

        assert event.symbol == "AAPL"
        assert event.side == TradeSide.BUY
        assert event.notional == Decimal("5000")

    @pytest.mark.parametrize(
        "field, value",
        [
            ("quantity", 0),
            ("fill_price", Decimal("0")),
            ("symbol", "  "),
        ],
    )
    def test_rejects_invalid_event(self, sample_leader_trade_data, field, value):
        sample_leader_trade_data[field] = value

        with pytest.raises(InvalidLeaderTradeError):
            LeaderTradeEvent(**sample_leader_trade_data)


class TestGuardrail:
    def test_symbol_guardrail(self):
        guardrail = Guardrail(follower_id=7, symbol="tsla", max_allocation_pct=Decimal("0.1"))

        assert guardrail.symbol == "TSLA"
        assert not guardrail.is_global
        assert guardrail.applies_to("TSLA")
        assert not guardrail.applies_to("AAPL")

    def test_global_guardrail_applies_everywhere(self):
        guardrail = Guardrail(follower_id=7, max_allocation_pct=Decimal("0.1"))

        assert guardrail.is_global
        assert guardrail.applies_to("AAPL")

    @pytest.mark.parametrize("pct", [Decimal("0"), Decimal("-0.1"), Decimal("1.01")])
    def test_rejects_out_of_range(self, pct):
        with pytest.raises(InvalidGuardrailError):
            Guardrail(follower_id=7, symbol="TSLA", max_allocation_pct=pct)

    def test_full_allocation_allowed(self):
        assert Guardrail(follower_id=7, max_allocation_pct=Decimal("1")).max_allocation_pct == 1


class TestFollowerSubscription:
    @pytest.mark.parametrize(
        "enabled, paused, replicating",
        [(True, False, True), (True, True, False), (False, False, False)],
    )
    def test_is_replicating(self, enabled, paused, replicating):
        subscription = FollowerSubscription(
            leader_id=1, follower_id=7, auto_copy_enabled=enabled, paused=paused
        )

        assert subscription.is_replicating is replicating


class TestPortfolioSnapshot:
    def test_allocation_and_loss(self):
        snapshot = PortfolioSnapshot(
            follower_id=7,
            nav=Decimal("20000"),
            positions={"AAPL": Decimal("5000"), "CASHX": Decimal("0")},
            daily_realized_pnl=Decimal("-500"),
        )

        assert snapshot.symbol_allocation("aapl") == Decimal("0.25")
        assert snapshot.position_count == 1
        assert snapshot.daily_loss_pct == Decimal("0.025")

    def test_profit_is_not_a_loss(self):
        snapshot = PortfolioSnapshot(
            follower_id=7, nav=Decimal("20000"), daily_realized_pnl=Decimal("300")
        )

        assert snapshot.daily_loss_pct == Decimal("0")

    def test_empty_account(self):
        snapshot = PortfolioSnapshot(follower_id=7, nav=Decimal("0"))

        assert snapshot.symbol_allocation("AAPL") == Decimal("0")
        assert snapshot.daily_loss_pct == Decimal("0")


class TestTradeFill:
    def test_cash_flow_sign(self, leader_fill_time):
        buy = TradeFill(
            id=1,
            user_id=7,
            symbol="AAPL",
            side=TradeSide.BUY,
            quantity=Decimal("2"),
            price=Decimal("100"),
            filled_at=leader_fill_time,
        )
        sell = TradeFill(
            id=2,
            user_id=7,
            symbol="AAPL",
            side=TradeSide.SELL,
            quantity=Decimal("2"),
            price=Decimal("90"),
            filled_at=leader_fill_time,
        )

        assert buy.cash_flow == Decimal("-200")
        assert sell.cash_flow == Decimal("180")


class TestTradingCalendar:
    def test_cutoff_later_today(self):
        """Test: 10:00 New York → today's 16:00 New York (21:00 UTC in winter)."""
        now = datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc)

        assert next_cutoff(now, NEW_YORK, 16) == datetime(2026, 3, 2, 21, 0, tzinfo=timezone.utc)

    def test_at_cutoff_rolls_to_next_day(self):
        now = datetime(2026, 3, 2, 21, 0, tzinfo=timezone.utc)

        assert next_cutoff(now, NEW_YORK, 16) == datetime(2026, 3, 3, 21, 0, tzinfo=timezone.utc)

    def test_after_cutoff_across_dst_change(self):
        """Test: Cutoff stays at 16:00 local when the clocks change (8 March 2026)."""
        now = datetime(2026, 3, 7, 22, 0, tzinfo=timezone.utc)

        assert next_cutoff(now, NEW_YORK, 16) == datetime(2026, 3, 8, 20, 0, tzinfo=timezone.utc)

    def test_cutoff_minute(self):
        now = datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc)

        assert next_cutoff(now, NEW_YORK, 15, 30) == datetime(
            2026, 3, 2, 20, 30, tzinfo=timezone.utc
        )

    def test_start_of_local_day(self):
        """Test: 02:00 UTC is still the previous day in New York."""
        now = datetime(2026, 3, 3, 2, 0, tzinfo=timezone.utc)

        assert start_of_local_day(now, NEW_YORK) == datetime(
            2026, 3, 2, 5, 0, tzinfo=timezone.utc
        )
