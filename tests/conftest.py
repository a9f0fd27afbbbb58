"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from copy_engine.infrastructure.persistence.sqlalchemy import Base


@pytest.fixture
def leader_fill_time():
    """Leader fill timestamp used across tests (10:00 New York time)."""
    return datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_leader_trade_data(leader_fill_time):
    """Sample LeaderTradeEvent data: BUY 25 AAPL @ $200."""
    return {
        "leader_id": 1,
        "broker_connection_id": 10,
        "account_number": "ACC-1",
        "symbol": "AAPL",
        "side": "BUY",
        "quantity": 25,
        "fill_price": Decimal("200"),
        "filled_at": leader_fill_time,
    }


@pytest.fixture
def sample_copy_order_data():
    """Sample data for creating copy orders in tests."""
    from copy_engine.domain.copying.value_objects import TradeSide

    return {
        "leader_trade_id": 42,
        "follower_id": 7,
        "leader_id": 1,
        "symbol": "aapl",
        "side": TradeSide.BUY,
        "quantity": 4,
    }


# ============================================================================
# DATABASE (in-memory SQLite)
# ============================================================================


@pytest.fixture
async def engine():
    """Create async SQLite engine with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,  # Set to True for debug
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session_factory(engine):
    """Create async session factory."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def session(session_factory):
    """Session rolled back after each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()
