"""Unit tests for the position sizing strategies."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from copy_engine.domain.copying.services import (
    SAFE_DEFAULT_FRACTION,
    default_fraction,
    kelly_fraction,
    momentum_fraction,
    percentage_fraction,
    quantity_for_allocation,
    resolve_strategy,
    risk_parity_fraction,
)
from copy_engine.domain.copying.value_objects import (
    PositionSizingStrategy,
    TradeFill,
    TradeSide,
)

START = datetime(2026, 1, 5, 15, 0, tzinfo=timezone.utc)


def make_fill(index: int, side: TradeSide, price: str, quantity: str = "10") -> TradeFill:
    return TradeFill(
        id=index + 1,
        user_id=1,
        symbol="AAPL",
        side=side,
        quantity=Decimal(quantity),
        price=Decimal(price),
        filled_at=START + timedelta(hours=index),
    )


def round_trips(results: list[tuple[str, str]]) -> list[TradeFill]:
    """BUY/SELL pairs at the given (buy, sell) prices, in time order."""
    fills = []
    for buy, sell in results:
        fills.append(make_fill(len(fills), TradeSide.BUY, buy))
        fills.append(make_fill(len(fills), TradeSide.SELL, sell))
    return fills


class TestResolveStrategy:
    @pytest.mark.parametrize(
        "tier, expected",
        [
            (0, PositionSizingStrategy.PERCENTAGE),
            (9, PositionSizingStrategy.PERCENTAGE),
            (10, PositionSizingStrategy.MOMENTUM),
            (49, PositionSizingStrategy.MOMENTUM),
            (50, PositionSizingStrategy.RISK_PARITY),
            (99, PositionSizingStrategy.RISK_PARITY),
            (100, PositionSizingStrategy.KELLY),
            (5000, PositionSizingStrategy.KELLY),
        ],
    )
    def test_tier_boundaries(self, tier, expected):
        assert resolve_strategy(tier) == expected


class TestPercentage:
    def test_scales_leader_allocation(self):
        """Test: $5,000 notional on $100,000 NAV → 0.05 × 0.8 = 0.04."""
        default = default_fraction(Decimal("5000"), Decimal("100000"))

        assert default == Decimal("0.05")
        assert percentage_fraction(default) == Decimal("0.04")

    def test_capped_at_five_percent(self):
        assert percentage_fraction(Decimal("0.50")) == Decimal("0.05")

    def test_default_fraction_without_leader_nav(self):
        assert default_fraction(Decimal("5000"), Decimal("0")) == Decimal("0")


class TestMomentum:
    def test_too_few_trades_returns_safe_default(self):
        fills = [make_fill(i, TradeSide.BUY, "100") for i in range(4)]

        assert momentum_fraction(fills) == SAFE_DEFAULT_FRACTION

    def test_strong_uptrend(self):
        """Test: Newest price 12% above oldest → 0.08."""
        prices = ["100", "103", "105", "108", "112"]
        fills = [make_fill(i, TradeSide.BUY, p) for i, p in enumerate(prices)]

        assert momentum_fraction(fills) == Decimal("0.08")

    def test_moderate_uptrend(self):
        prices = ["100", "101", "102", "104", "107"]
        fills = [make_fill(i, TradeSide.BUY, p) for i, p in enumerate(prices)]

        assert momentum_fraction(fills) == Decimal("0.06")

    def test_strong_downtrend(self):
        prices = ["100", "97", "95", "92", "88"]
        fills = [make_fill(i, TradeSide.BUY, p) for i, p in enumerate(prices)]

        assert momentum_fraction(fills) == Decimal("0.02")

    def test_moderate_downtrend(self):
        prices = ["100", "99", "98", "96", "93"]
        fills = [make_fill(i, TradeSide.BUY, p) for i, p in enumerate(prices)]

        assert momentum_fraction(fills) == Decimal("0.03")

    def test_flat_market(self):
        prices = ["100", "101", "99", "100", "102"]
        fills = [make_fill(i, TradeSide.BUY, p) for i, p in enumerate(prices)]

        assert momentum_fraction(fills) == SAFE_DEFAULT_FRACTION

    def test_input_order_does_not_matter(self):
        prices = ["100", "103", "105", "108", "112"]
        fills = [make_fill(i, TradeSide.BUY, p) for i, p in enumerate(prices)]

        assert momentum_fraction(list(reversed(fills))) == Decimal("0.08")


class TestRiskParity:
    @pytest.mark.parametrize(
        "positions, expected",
        [
            (0, Decimal("0.10")),
            (1, Decimal("0.5")),
            (3, Decimal("0.25")),
        ],
    )
    def test_equal_weight(self, positions, expected):
        assert risk_parity_fraction(positions) == expected


class TestKelly:
    def test_fewer_than_ten_trades_returns_exactly_safe_default(self):
        fills = round_trips([("100", "110")] * 4)

        assert len(fills) == 8
        assert kelly_fraction(fills) == Decimal("0.05")

    def test_no_losses_returns_safe_default(self):
        fills = round_trips([("100", "110")] * 6)

        assert kelly_fraction(fills) == SAFE_DEFAULT_FRACTION

    def test_result_within_bounds(self):
        """Test: Mixed history yields a fraction inside [0.01, 0.20]."""
        fills = round_trips(
            [("100", "110"), ("100", "95"), ("100", "108"), ("100", "97"), ("100", "112")]
        )

        result = kelly_fraction(fills)

        assert Decimal("0.01") <= result <= Decimal("0.20")

    def test_clamped_to_upper_bound(self):
        """Test: Large, frequent wins are capped at 0.20."""
        fills = round_trips([("100", "150")] * 5 + [("100", "99")])

        assert kelly_fraction(fills) == Decimal("0.20")

    def test_clamped_to_lower_bound(self):
        """Test: A losing history still allocates the 0.01 minimum."""
        fills = round_trips([("100", "101")] + [("100", "80")] * 5)

        assert kelly_fraction(fills) == Decimal("0.01")

    def test_fill_size_does_not_weight_pnl(self):
        """Test: Per-share P&L, small winners and large losers."""
        # Arrange
        fills = []
        for buy, sell, quantity in [
            ("100", "110", "1"),
            ("100", "95", "10"),
            ("100", "110", "1"),
            ("100", "95", "10"),
            ("100", "110", "1"),
        ]:
            fills.append(make_fill(len(fills), TradeSide.BUY, buy, quantity))
            fills.append(make_fill(len(fills), TradeSide.SELL, sell, quantity))

        # Act
        result = kelly_fraction(fills)

        # Assert
        # 3 wins over 9 pairs, b = 10 / (10 / 6) = 6, kelly ≈ 0.222
        assert result == Decimal("0.20")


class TestQuantityForAllocation:
    def test_floor_of_allocation(self):
        """Test: 0.04 × $20,000 / $200 = 4 shares."""
        assert quantity_for_allocation(Decimal("0.04"), Decimal("20000"), Decimal("200")) == 4

    def test_rounds_down(self):
        assert quantity_for_allocation(Decimal("0.05"), Decimal("20000"), Decimal("300")) == 3

    def test_underflow(self):
        assert quantity_for_allocation(Decimal("0.01"), Decimal("1000"), Decimal("200")) == 0

    @pytest.mark.parametrize(
        "allocation, nav, price",
        [
            (Decimal("0"), Decimal("20000"), Decimal("200")),
            (Decimal("0.04"), Decimal("0"), Decimal("200")),
            (Decimal("0.04"), Decimal("20000"), Decimal("0")),
        ],
    )
    def test_non_positive_inputs(self, allocation, nav, price):
        assert quantity_for_allocation(allocation, nav, price) == 0
