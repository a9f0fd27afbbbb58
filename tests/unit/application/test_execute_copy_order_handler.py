"""Unit tests for ExecuteCopyOrderHandler (order execution coordinator)."""

from decimal import Decimal

import pytest

from copy_engine.application.copying.commands import ExecuteCopyOrderCommand
from copy_engine.application.copying.dtos import FollowerOutcome
from copy_engine.application.copying.handlers import ExecuteCopyOrderHandler
from copy_engine.domain.brokerage.exceptions import OrderRejectedError
from copy_engine.domain.brokerage.ports import BrokeragePort
from copy_engine.domain.brokerage.value_objects import OrderReceipt
from copy_engine.domain.copying.events import CopyExecutedEvent
from copy_engine.domain.copying.value_objects import CopyOrderStatus, TradeSide


class CancellingBrokerage(BrokeragePort):
    """Follower cancels the order while the brokerage call is in flight."""

    def __init__(self, store) -> None:
        self._store = store

    async def place_order(self, authorization_id, account_number, symbol, side, quantity):
        for order in self._store.copy_orders.values():
            if order.is_queued:
                order.cancel()
                order.clear_domain_events()
        return OrderReceipt(order_id="BRK-LATE", symbol=symbol, side=side, quantity=quantity)

    async def get_holdings(self, authorization_id):
        return []

    async def get_activities(self, authorization_id, since=None):
        return []

    async def close(self):
        pass


def make_command(**overrides) -> ExecuteCopyOrderCommand:
    fields = {
        "follower_id": 7,
        "leader_id": 1,
        "leader_trade_id": 42,
        "account_number": "ACC-1",
        "symbol": "AAPL",
        "side": TradeSide.BUY,
        "fill_price": Decimal("200"),
        "allocation": Decimal("0.04"),
        "follower_nav": Decimal("20000"),
    }
    fields.update(overrides)
    return ExecuteCopyOrderCommand(**fields)


class TestExecuteCopyOrderHandler:
    @pytest.mark.asyncio
    async def test_places_order(self, store, uow_factory, brokerage, event_bus):
        # Arrange
        store.add_follower(7)
        handler = ExecuteCopyOrderHandler(uow_factory, brokerage, event_bus)

        # Act
        attempt = await handler.handle(make_command())

        # Assert
        assert attempt.outcome == FollowerOutcome.PLACED
        assert attempt.quantity == 4
        assert attempt.copy_order.status == "placed"
        assert attempt.copy_order.broker_order_id == "BRK-1"
        assert attempt.copy_order.filled_at is not None
        # Phase 1 and phase 2 each commit
        assert store.commits == 2

    @pytest.mark.asyncio
    async def test_loads_nav_when_not_given(self, store, uow_factory, brokerage, event_bus):
        # Arrange
        store.add_follower(7, nav=Decimal("50000"))
        handler = ExecuteCopyOrderHandler(uow_factory, brokerage, event_bus)

        # Act
        attempt = await handler.handle(make_command(follower_nav=None))

        # Assert
        assert attempt.quantity == 10

    @pytest.mark.asyncio
    async def test_precomputed_quantity(self, store, uow_factory, brokerage, event_bus):
        """Test: Delayed flush passes the quantity fixed at scheduling time."""
        # Arrange
        store.add_follower(7)
        handler = ExecuteCopyOrderHandler(uow_factory, brokerage, event_bus)

        # Act
        attempt = await handler.handle(
            make_command(quantity=3, allocation=None, fill_price=None, follower_nav=None)
        )

        # Assert
        assert attempt.outcome == FollowerOutcome.PLACED
        assert brokerage.orders[0]["quantity"] == 3

    @pytest.mark.asyncio
    async def test_rejected_order_fails(self, store, uow_factory, brokerage, event_bus):
        """Test: Brokerage error → FAILED, error kept, no fill time, one event."""
        # Arrange
        store.add_follower(7)
        brokerage.errors["auth-7"] = OrderRejectedError("Insufficient buying power")
        handler = ExecuteCopyOrderHandler(uow_factory, brokerage, event_bus)

        # Act
        attempt = await handler.handle(make_command())

        # Assert
        assert attempt.outcome == FollowerOutcome.FAILED
        assert attempt.reason == "Insufficient buying power"

        order = store.copy_orders[attempt.copy_order.id]
        assert order.status == CopyOrderStatus.FAILED
        assert order.error_message == "Insufficient buying power"
        assert order.filled_at is None

        assert len(event_bus.published) == 1
        event = event_bus.published[0]
        assert isinstance(event, CopyExecutedEvent)
        assert event.status == "failed"
        assert event.error == "Insufficient buying power"

    @pytest.mark.asyncio
    async def test_existing_order_is_not_resubmitted(
        self, store, uow_factory, brokerage, event_bus
    ):
        # Arrange
        store.add_follower(7)
        handler = ExecuteCopyOrderHandler(uow_factory, brokerage, event_bus)
        first = await handler.handle(make_command())

        # Act
        second = await handler.handle(make_command())

        # Assert
        assert second.outcome == FollowerOutcome.SKIPPED_DUPLICATE
        assert second.copy_order.id == first.copy_order.id
        assert len(brokerage.orders) == 1

    @pytest.mark.asyncio
    async def test_cancel_during_submission_follows_brokerage(
        self, store, uow_factory, event_bus
    ):
        """Test: Order the brokerage accepted after a cancel is recorded PLACED."""
        # Arrange
        store.add_follower(7)
        brokerage = CancellingBrokerage(store)
        handler = ExecuteCopyOrderHandler(uow_factory, brokerage, event_bus)

        # Act
        attempt = await handler.handle(make_command())

        # Assert
        assert attempt.outcome == FollowerOutcome.PLACED
        order = store.copy_orders[attempt.copy_order.id]
        assert order.status == CopyOrderStatus.PLACED
        assert order.broker_order_id == "BRK-LATE"

        assert len(event_bus.published) == 1
        event = event_bus.published[0]
        assert isinstance(event, CopyExecutedEvent)
        assert event.status == "placed"

    @pytest.mark.asyncio
    async def test_cancel_during_failed_submission_stays_cancelled(
        self, store, uow_factory, event_bus
    ):
        # Arrange
        store.add_follower(7)

        class CancelThenReject(CancellingBrokerage):
            async def place_order(self, authorization_id, account_number, symbol, side, quantity):
                await super().place_order(
                    authorization_id, account_number, symbol, side, quantity
                )
                raise OrderRejectedError("Market closed")

        handler = ExecuteCopyOrderHandler(uow_factory, CancelThenReject(store), event_bus)

        # Act
        attempt = await handler.handle(make_command())

        # Assert
        assert attempt.outcome == FollowerOutcome.CANCELLED
        order = store.copy_orders[attempt.copy_order.id]
        assert order.status == CopyOrderStatus.CANCELLED
        assert order.broker_order_id is None
        assert event_bus.published == []

    @pytest.mark.asyncio
    async def test_underflow_creates_nothing(self, store, uow_factory, brokerage, event_bus):
        # Arrange
        store.add_follower(7)
        handler = ExecuteCopyOrderHandler(uow_factory, brokerage, event_bus)

        # Act
        attempt = await handler.handle(make_command(allocation=Decimal("0.001")))

        # Assert
        assert attempt.outcome == FollowerOutcome.SKIPPED_UNDERFLOW
        assert store.copy_orders == {}
        assert brokerage.orders == []
