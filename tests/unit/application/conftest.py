"""In-memory Unit of Work and brokerage fakes for handler tests."""

import copy
from datetime import datetime
from decimal import Decimal
from typing import Optional

import pytest

from copy_engine.application.shared import UnitOfWork
from copy_engine.domain.brokerage.ports import BrokeragePort
from copy_engine.domain.brokerage.repositories import BrokerConnectionRepository
from copy_engine.domain.brokerage.value_objects import BrokerConnection, OrderReceipt
from copy_engine.domain.copying.entities import CopyOrder, DelayedCopyOrder
from copy_engine.domain.copying.exceptions import DuplicateCopyOrderError
from copy_engine.domain.copying.repositories import (
    CopyOrderRepository,
    DelayedCopyOrderRepository,
    GuardrailRepository,
    PortfolioRepository,
    SubscriptionRepository,
    TradeHistoryRepository,
)
from copy_engine.domain.copying.value_objects import (
    CopyOrderStatus,
    DelayedCopyStatus,
    FollowerSubscription,
    Guardrail,
    LeaderTradeEvent,
    TradeFill,
    TradeSide,
)
from copy_engine.infrastructure.messaging import EventBus


class InMemoryStore:
    """Tables shared by every Unit of Work opened in a test."""

    def __init__(self) -> None:
        self.copy_orders: dict[int, CopyOrder] = {}
        self.delayed_copy_orders: dict[int, DelayedCopyOrder] = {}
        self.guardrails: list[Guardrail] = []
        self.subscriptions: list[FollowerSubscription] = []
        self.trades: list[TradeFill] = []
        self.positions: dict[int, dict[str, Decimal]] = {}
        self.connections: dict[int, BrokerConnection] = {}
        self.commits = 0

    # --- seeding helpers ---

    def add_account(self, user_id: int, positions: dict[str, Decimal] | None = None) -> None:
        self.positions[user_id] = dict(positions or {})

    def add_connection(self, user_id: int, authorization_id: str | None = None) -> None:
        self.connections[user_id] = BrokerConnection(
            id=user_id,
            user_id=user_id,
            authorization_id=authorization_id or f"auth-{user_id}",
        )

    def add_follower(
        self,
        follower_id: int,
        nav: Decimal = Decimal("20000"),
        leader_id: int = 1,
        **subscription,
    ) -> None:
        """Follower with cash-like NAV, a connection and an active subscription."""
        self.add_account(follower_id, {"CASHX": nav})
        self.add_connection(follower_id)
        self.subscriptions.append(
            FollowerSubscription(
                leader_id=leader_id,
                follower_id=follower_id,
                auto_copy_enabled=subscription.pop("auto_copy_enabled", True),
                **subscription,
            )
        )

    def add_trade(self, **fields) -> TradeFill:
        trade = TradeFill(id=len(self.trades) + 1, **fields)
        self.trades.append(trade)
        return trade


class InMemoryCopyOrderRepository(CopyOrderRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def save(self, order: CopyOrder) -> None:
        if order.id is None:
            for existing in self._store.copy_orders.values():
                if (existing.leader_trade_id, existing.follower_id) == (
                    order.leader_trade_id,
                    order.follower_id,
                ):
                    raise DuplicateCopyOrderError(
                        "Copy order already exists",
                        leader_trade_id=order.leader_trade_id,
                        follower_id=order.follower_id,
                    )
            order.id = len(self._store.copy_orders) + 1
        stored = copy.deepcopy(order)
        stored.clear_domain_events()
        self._store.copy_orders[order.id] = stored

    async def get_by_id(self, copy_order_id: int) -> Optional[CopyOrder]:
        order = self._store.copy_orders.get(copy_order_id)
        return copy.deepcopy(order) if order else None

    async def get_by_leader_trade_and_follower(
        self, leader_trade_id: int, follower_id: int
    ) -> Optional[CopyOrder]:
        for order in self._store.copy_orders.values():
            if order.leader_trade_id == leader_trade_id and order.follower_id == follower_id:
                return copy.deepcopy(order)
        return None

    async def list_for_follower(
        self,
        follower_id: int,
        status: CopyOrderStatus | None = None,
        symbol: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[CopyOrder]:
        orders = [
            o
            for o in self._store.copy_orders.values()
            if o.follower_id == follower_id
            and (status is None or o.status == status)
            and (symbol is None or o.symbol == symbol)
        ]
        orders.sort(key=lambda o: o.id, reverse=True)
        return [copy.deepcopy(o) for o in orders[offset : offset + limit]]

    async def count_for_follower(self, follower_id: int) -> int:
        return sum(1 for o in self._store.copy_orders.values() if o.follower_id == follower_id)

    async def count_by_status(self, follower_id: int) -> dict[CopyOrderStatus, int]:
        counts: dict[CopyOrderStatus, int] = {}
        for order in self._store.copy_orders.values():
            if order.follower_id == follower_id:
                counts[order.status] = counts.get(order.status, 0) + 1
        return counts

    async def most_copied_symbols(self, follower_id: int, limit: int = 5) -> list[tuple[str, int]]:
        counts: dict[str, int] = {}
        for order in self._store.copy_orders.values():
            if order.follower_id == follower_id:
                counts[order.symbol] = counts.get(order.symbol, 0) + 1
        return sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]


class InMemoryDelayedCopyOrderRepository(DelayedCopyOrderRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def save(self, order: DelayedCopyOrder) -> None:
        if order.id is None:
            if await self.get_by_trade_and_follower(order.original_trade_id, order.follower_id):
                raise DuplicateCopyOrderError(
                    "Delayed copy order already exists",
                    original_trade_id=order.original_trade_id,
                    follower_id=order.follower_id,
                )
            order.id = len(self._store.delayed_copy_orders) + 1
        stored = copy.deepcopy(order)
        stored.clear_domain_events()
        self._store.delayed_copy_orders[order.id] = stored

    async def get_by_id(self, delayed_copy_order_id: int) -> Optional[DelayedCopyOrder]:
        order = self._store.delayed_copy_orders.get(delayed_copy_order_id)
        return copy.deepcopy(order) if order else None

    async def get_by_trade_and_follower(
        self, original_trade_id: int, follower_id: int
    ) -> Optional[DelayedCopyOrder]:
        for order in self._store.delayed_copy_orders.values():
            if order.original_trade_id == original_trade_id and order.follower_id == follower_id:
                return copy.deepcopy(order)
        return None

    async def get_due(self, now: datetime, limit: int | None = None) -> list[DelayedCopyOrder]:
        due = sorted(
            (o for o in self._store.delayed_copy_orders.values() if o.is_due(now)),
            key=lambda o: o.scheduled_for,
        )
        return [copy.deepcopy(o) for o in due[:limit]]

    async def list_for_follower(
        self, follower_id: int, status: DelayedCopyStatus | None = None
    ) -> list[DelayedCopyOrder]:
        return [
            copy.deepcopy(o)
            for o in self._store.delayed_copy_orders.values()
            if o.follower_id == follower_id and (status is None or o.status == status)
        ]


class InMemoryGuardrailRepository(GuardrailRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_for_follower(self, follower_id: int) -> list[Guardrail]:
        return [g for g in self._store.guardrails if g.follower_id == follower_id]

    async def replace(self, guardrail: Guardrail) -> None:
        await self.delete(guardrail.follower_id, guardrail.symbol)
        self._store.guardrails.append(guardrail)

    async def delete(self, follower_id: int, symbol: str | None) -> bool:
        before = len(self._store.guardrails)
        self._store.guardrails = [
            g
            for g in self._store.guardrails
            if not (g.follower_id == follower_id and g.symbol == symbol)
        ]
        return len(self._store.guardrails) < before


class InMemorySubscriptionRepository(SubscriptionRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_for_leader(self, leader_id: int) -> list[FollowerSubscription]:
        return [s for s in self._store.subscriptions if s.leader_id == leader_id]

    async def get(self, leader_id: int, follower_id: int) -> Optional[FollowerSubscription]:
        for subscription in self._store.subscriptions:
            if (subscription.leader_id, subscription.follower_id) == (leader_id, follower_id):
                return subscription
        return None


class InMemoryTradeHistoryRepository(TradeHistoryRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def find_leader_trade(self, event: LeaderTradeEvent) -> Optional[TradeFill]:
        for trade in self._store.trades:
            if (
                trade.user_id == event.leader_id
                and trade.symbol == event.symbol
                and trade.side == event.side
                and trade.quantity == event.quantity
                and trade.filled_at == event.filled_at
            ):
                return trade
        return None

    async def get_user_trades(
        self, user_id: int, since: datetime, symbol: str | None = None
    ) -> list[TradeFill]:
        return sorted(
            (
                t
                for t in self._store.trades
                if t.user_id == user_id
                and t.filled_at >= since
                and (symbol is None or t.symbol == symbol)
            ),
            key=lambda t: t.filled_at,
        )

    async def get_recent_symbol_trades(
        self, symbol: str, since: datetime, limit: int
    ) -> list[TradeFill]:
        trades = sorted(
            (t for t in self._store.trades if t.symbol == symbol and t.filled_at >= since),
            key=lambda t: t.filled_at,
            reverse=True,
        )
        return trades[:limit]


class InMemoryPortfolioRepository(PortfolioRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def account_exists(self, user_id: int) -> bool:
        return user_id in self._store.positions

    async def get_positions(self, user_id: int) -> dict[str, Decimal]:
        return dict(self._store.positions.get(user_id, {}))


class InMemoryBrokerConnectionRepository(BrokerConnectionRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_active_for_user(self, user_id: int) -> Optional[BrokerConnection]:
        return self._store.connections.get(user_id)


class InMemoryUnitOfWork(UnitOfWork):
    """Writes go straight to the store; commit only counts."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._copy_orders = InMemoryCopyOrderRepository(store)
        self._delayed_copy_orders = InMemoryDelayedCopyOrderRepository(store)
        self._guardrails = InMemoryGuardrailRepository(store)
        self._subscriptions = InMemorySubscriptionRepository(store)
        self._trade_history = InMemoryTradeHistoryRepository(store)
        self._portfolios = InMemoryPortfolioRepository(store)
        self._broker_connections = InMemoryBrokerConnectionRepository(store)

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    async def commit(self) -> None:
        self._store.commits += 1

    async def rollback(self) -> None:
        pass

    @property
    def copy_orders(self) -> InMemoryCopyOrderRepository:
        return self._copy_orders

    @property
    def delayed_copy_orders(self) -> InMemoryDelayedCopyOrderRepository:
        return self._delayed_copy_orders

    @property
    def guardrails(self) -> InMemoryGuardrailRepository:
        return self._guardrails

    @property
    def subscriptions(self) -> InMemorySubscriptionRepository:
        return self._subscriptions

    @property
    def trade_history(self) -> InMemoryTradeHistoryRepository:
        return self._trade_history

    @property
    def portfolios(self) -> InMemoryPortfolioRepository:
        return self._portfolios

    @property
    def broker_connections(self) -> InMemoryBrokerConnectionRepository:
        return self._broker_connections


class FakeBrokerage(BrokeragePort):
    """Records orders; raises the configured error for an authorization ID."""

    def __init__(self) -> None:
        self.orders: list[dict] = []
        self.errors: dict[str, Exception] = {}

    async def place_order(
        self,
        authorization_id: str,
        account_number: str,
        symbol: str,
        side: str,
        quantity: int,
    ) -> OrderReceipt:
        if authorization_id in self.errors:
            raise self.errors[authorization_id]
        self.orders.append(
            {
                "authorization_id": authorization_id,
                "account_number": account_number,
                "symbol": symbol,
                "side": side,
                "quantity": quantity,
            }
        )
        return OrderReceipt(
            order_id=f"BRK-{len(self.orders)}", symbol=symbol, side=side, quantity=quantity
        )

    async def get_holdings(self, authorization_id: str):
        return []

    async def get_activities(self, authorization_id: str, since: datetime | None = None):
        return []

    async def close(self) -> None:
        pass


class RecordingEventBus(EventBus):
    """EventBus that also keeps every published event."""

    def __init__(self) -> None:
        super().__init__()
        self.published = []

    async def publish(self, event) -> None:
        self.published.append(event)
        await super().publish(event)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def uow_factory(store):
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def brokerage():
    return FakeBrokerage()


@pytest.fixture
def event_bus():
    return RecordingEventBus()


@pytest.fixture
def leader_trade(store, leader_fill_time):
    """The leader's persisted fill: BUY 25 AAPL @ $200 on $100,000 NAV."""
    store.add_account(1, {"CASHX": Decimal("100000")})
    return store.add_trade(
        user_id=1,
        symbol="AAPL",
        side=TradeSide.BUY,
        quantity=Decimal("25"),
        price=Decimal("200"),
        filled_at=leader_fill_time,
        broker_connection_id=10,
        account_number="ACC-1",
    )
