"""E2E tests for leader trade replication.

The handlers are wired exactly as the Celery worker wires them, against
the in-memory SQLite database. Only the brokerage is faked.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from copy_engine.application.copying.commands import (
    FlushDelayedCopyOrdersCommand,
    ReplicateLeaderTradeCommand,
)
from copy_engine.application.copying.dtos import FollowerOutcome
from copy_engine.application.copying.services import InMemoryFollowerLock
from copy_engine.config import Settings
from copy_engine.domain.brokerage.ports import BrokeragePort
from copy_engine.domain.brokerage.value_objects import OrderReceipt
from copy_engine.domain.copying.value_objects import CopyOrderStatus, DelayedCopyStatus
from copy_engine.infrastructure.messaging import reset_event_bus
from copy_engine.infrastructure.persistence.sqlalchemy import SQLAlchemyUnitOfWork
from copy_engine.infrastructure.persistence.sqlalchemy.models import (
    BrokerConnectionModel,
    CopySubscriptionModel,
    HoldingModel,
    TradeModel,
    UserModel,
)
from copy_engine.presentation.workers.tasks.copy_tasks import build_handlers, parse_leader_trade

LEADER_ID = 1
DIRECT_FOLLOWER = 7
NO_CONNECTION_FOLLOWER = 8
DEFERRED_FOLLOWER = 9
PAUSED_FOLLOWER = 11


class PaperBrokerage(BrokeragePort):
    """Accepts every order and remembers it."""

    def __init__(self) -> None:
        self.orders: list[tuple[str, str, str, int]] = []

    async def place_order(self, authorization_id, account_number, symbol, side, quantity):
        self.orders.append((authorization_id, symbol, side, quantity))
        return OrderReceipt(
            order_id=f"PAPER-{len(self.orders)}", symbol=symbol, side=side, quantity=quantity
        )

    async def get_holdings(self, authorization_id):
        return []

    async def get_activities(self, authorization_id, since=None):
        return []


@pytest.fixture
def brokerage():
    return PaperBrokerage()


@pytest.fixture
def handlers(session_factory, brokerage):
    settings = Settings(copy_max_parallel_followers=1, delayed_copy_allocation_pct=Decimal("0.03"))
    yield build_handlers(
        session_factory, settings, brokerage=brokerage, locks=InMemoryFollowerLock()
    )
    reset_event_bus()


@pytest.fixture
async def copy_network(session_factory, leader_fill_time):
    """Leader with $100,000 NAV and four subscribed followers with $20,000 each."""
    async with session_factory() as session:
        session.add(UserModel(id=LEADER_ID, email="leader@example.com"))
        session.add(
            HoldingModel(
                user_id=LEADER_ID,
                account_number="ACC-1",
                symbol="SPY",
                quantity=Decimal("200"),
                market_value=Decimal("100000"),
            )
        )
        for follower_id in (DIRECT_FOLLOWER, NO_CONNECTION_FOLLOWER, DEFERRED_FOLLOWER, PAUSED_FOLLOWER):
            session.add(UserModel(id=follower_id, email=f"follower{follower_id}@example.com"))
            session.add(
                HoldingModel(
                    user_id=follower_id,
                    account_number=f"ACC-{follower_id}",
                    symbol="MSFT",
                    quantity=Decimal("50"),
                    market_value=Decimal("20000"),
                )
            )
            if follower_id != NO_CONNECTION_FOLLOWER:
                session.add(
                    BrokerConnectionModel(user_id=follower_id, authorization_id=f"auth-{follower_id}")
                )
            session.add(
                CopySubscriptionModel(
                    leader_id=LEADER_ID,
                    follower_id=follower_id,
                    auto_copy_enabled=True,
                    paused=follower_id == PAUSED_FOLLOWER,
                    deferred_mode=follower_id == DEFERRED_FOLLOWER,
                )
            )
        trade = TradeModel(
            user_id=LEADER_ID,
            broker_connection_id=10,
            account_number="ACC-1",
            symbol="AAPL",
            side="BUY",
            quantity=Decimal("25"),
            price=Decimal("200"),
            filled_at=leader_fill_time,
        )
        session.add(trade)
        await session.commit()
        return trade.id


@pytest.fixture
def command(sample_leader_trade_data):
    return ReplicateLeaderTradeCommand(**sample_leader_trade_data)


class TestReplicationFlow:
    @pytest.mark.asyncio
    async def test_fan_out_to_followers(self, handlers, brokerage, copy_network, command, session_factory):
        """Test: Direct follower gets 4 shares now, deferred follower 3 shares at the cutoff."""
        # Act
        result = await handlers.replicate.handle(command)

        # Assert
        assert result.leader_trade_id == copy_network
        outcomes = {f.follower_id: f for f in result.followers}
        assert set(outcomes) == {DIRECT_FOLLOWER, NO_CONNECTION_FOLLOWER, DEFERRED_FOLLOWER}

        direct = outcomes[DIRECT_FOLLOWER]
        assert direct.outcome == FollowerOutcome.PLACED
        assert direct.strategy == "percentage"
        assert direct.quantity == 4
        assert outcomes[NO_CONNECTION_FOLLOWER].outcome == FollowerOutcome.SKIPPED_NO_CONNECTION
        assert outcomes[DEFERRED_FOLLOWER].outcome == FollowerOutcome.SCHEDULED
        assert outcomes[DEFERRED_FOLLOWER].quantity == 3

        assert brokerage.orders == [("auth-7", "AAPL", "BUY", 4)]

        uow = SQLAlchemyUnitOfWork(session_factory)
        async with uow:
            order = await uow.copy_orders.get_by_leader_trade_and_follower(
                copy_network, DIRECT_FOLLOWER
            )
            pending = await uow.delayed_copy_orders.list_for_follower(DEFERRED_FOLLOWER)

        assert order.status == CopyOrderStatus.PLACED
        assert order.broker_order_id == "PAPER-1"
        assert len(pending) == 1
        assert pending[0].status == DelayedCopyStatus.PENDING
        assert pending[0].original_trade_id == copy_network

    @pytest.mark.asyncio
    async def test_redelivery_places_nothing_twice(self, handlers, brokerage, copy_network, command):
        """Test: Replaying the same leader fill skips followers already handled."""
        # Arrange
        await handlers.replicate.handle(command)

        # Act
        replay = await handlers.replicate.handle(command)

        # Assert
        outcomes = {f.follower_id: f.outcome for f in replay.followers}
        assert outcomes[DIRECT_FOLLOWER] == FollowerOutcome.SKIPPED_DUPLICATE
        assert outcomes[DEFERRED_FOLLOWER] == FollowerOutcome.SKIPPED_DUPLICATE
        assert len(brokerage.orders) == 1

    @pytest.mark.asyncio
    async def test_flush_executes_deferred_copy(self, handlers, brokerage, copy_network, command, session_factory):
        # Arrange
        await handlers.replicate.handle(command)
        after_cutoff = datetime.now(timezone.utc) + timedelta(days=4)

        # Act
        flushed = await handlers.flush.handle(FlushDelayedCopyOrdersCommand(now=after_cutoff))
        flushed_again = await handlers.flush.handle(FlushDelayedCopyOrdersCommand(now=after_cutoff))

        # Assert
        assert flushed.processed == 1
        assert flushed.executed == 1
        assert flushed_again.processed == 0
        assert brokerage.orders[-1] == ("auth-9", "AAPL", "BUY", 3)

        uow = SQLAlchemyUnitOfWork(session_factory)
        async with uow:
            delayed = (await uow.delayed_copy_orders.list_for_follower(DEFERRED_FOLLOWER))[0]
            order = await uow.copy_orders.get_by_leader_trade_and_follower(
                copy_network, DEFERRED_FOLLOWER
            )

        assert delayed.status == DelayedCopyStatus.EXECUTED
        assert delayed.copy_order_id == order.id
        assert order.status == CopyOrderStatus.PLACED

    @pytest.mark.asyncio
    async def test_unknown_leader_trade(self, handlers, brokerage, copy_network, command, sample_leader_trade_data):
        unknown = ReplicateLeaderTradeCommand(
            **{**sample_leader_trade_data, "quantity": 26}
        )

        result = await handlers.replicate.handle(unknown)

        assert result.leader_trade_id is None
        assert result.followers == []
        assert brokerage.orders == []


class TestParseLeaderTrade:
    def test_camel_case_payload(self):
        command = parse_leader_trade(
            {
                "leaderId": 1,
                "brokerConnectionId": 10,
                "accountNumber": "ACC-1",
                "symbol": "AAPL",
                "side": "BUY",
                "quantity": 25,
                "fillPrice": "200.00",
                "filledAt": "2026-03-02T15:00:00+00:00",
            }
        )

        assert command.leader_id == 1
        assert command.fill_price == Decimal("200.00")
        assert command.filled_at == datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc)

    def test_naive_timestamp_is_utc(self):
        """Test: A fill time without offset is read as UTC."""
        command = parse_leader_trade(
            {
                "leader_id": 1,
                "broker_connection_id": 10,
                "account_number": "ACC-1",
                "symbol": "AAPL",
                "side": "SELL",
                "quantity": 5,
                "fill_price": 199.5,
                "filled_at": "2026-03-02T15:00:00",
            }
        )

        assert command.filled_at.tzinfo == timezone.utc
        assert command.fill_price == Decimal("199.5")
