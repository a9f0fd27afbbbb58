"""Unit tests for DelayedCopyOrder aggregate."""

from datetime import datetime, timedelta, timezone

import pytest

from copy_engine.domain.copying.entities import DelayedCopyOrder
from copy_engine.domain.copying.events import DelayedCopyScheduledEvent
from copy_engine.domain.copying.exceptions import (
    InvalidCopyQuantityError,
    InvalidDelayedCopyStateError,
)
from copy_engine.domain.copying.value_objects import DelayedCopyStatus, TradeSide

CUTOFF = datetime(2026, 3, 2, 21, 0, tzinfo=timezone.utc)


@pytest.fixture
def delayed_order():
    return DelayedCopyOrder.schedule(
        original_trade_id=42,
        follower_id=7,
        leader_id=1,
        account_number="ACC-1",
        symbol="tsla",
        side=TradeSide.BUY,
        quantity=3,
        scheduled_for=CUTOFF,
    )


class TestDelayedCopyOrder:
    def test_schedule_creates_pending_order(self, delayed_order):
        """Test: Scheduled order is PENDING with normalised symbol."""
        assert delayed_order.status == DelayedCopyStatus.PENDING
        assert delayed_order.symbol == "TSLA"
        assert delayed_order.copy_order_id is None
        assert delayed_order.executed_at is None
        assert delayed_order.is_pending

    def test_rejects_zero_quantity(self):
        with pytest.raises(InvalidCopyQuantityError):
            DelayedCopyOrder.schedule(
                original_trade_id=42,
                follower_id=7,
                leader_id=1,
                account_number="ACC-1",
                symbol="TSLA",
                side=TradeSide.BUY,
                quantity=0,
                scheduled_for=CUTOFF,
            )

    def test_record_scheduled_emits_event(self, delayed_order):
        # Arrange
        delayed_order.id = 5

        # Act
        delayed_order.record_scheduled()

        # Assert
        events = delayed_order.get_domain_events()
        assert len(events) == 1
        assert isinstance(events[0], DelayedCopyScheduledEvent)
        assert events[0].delayed_copy_order_id == 5
        assert events[0].scheduled_for == CUTOFF

    def test_is_due(self, delayed_order):
        """Test: Due at and after the scheduled cutoff, never before."""
        assert not delayed_order.is_due(CUTOFF - timedelta(seconds=1))
        assert delayed_order.is_due(CUTOFF)
        assert delayed_order.is_due(CUTOFF + timedelta(hours=1))

    def test_mark_executed(self, delayed_order):
        # Act
        delayed_order.mark_executed(copy_order_id=99)

        # Assert
        assert delayed_order.status == DelayedCopyStatus.EXECUTED
        assert delayed_order.copy_order_id == 99
        assert delayed_order.executed_at is not None
        assert not delayed_order.is_due(CUTOFF + timedelta(hours=1))

    def test_mark_failed(self, delayed_order):
        # Act
        delayed_order.mark_failed("No active brokerage connection")

        # Assert
        assert delayed_order.status == DelayedCopyStatus.FAILED
        assert delayed_order.error_message == "No active brokerage connection"
        assert delayed_order.copy_order_id is None

    def test_executed_order_cannot_fail(self, delayed_order):
        """Test: EXECUTED and FAILED are terminal."""
        delayed_order.mark_executed(copy_order_id=99)

        with pytest.raises(InvalidDelayedCopyStateError):
            delayed_order.mark_failed("late error")
