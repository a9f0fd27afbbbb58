"""Async engine and session factory construction."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from copy_engine.config import Settings


def create_engine(settings: Settings, **overrides: Any) -> AsyncEngine:
    """Create the async engine with the configured pool.

    SQLite URLs (tests, local runs) skip the pool arguments, which the
    SQLite dialect does not accept.
    """
    options: dict[str, Any] = {"echo": settings.db_echo, "pool_pre_ping": True}
    if not settings.database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=settings.db_pool_recycle,
        )
    options.update(overrides)
    return create_async_engine(settings.database_url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: entities are read after commit in async code
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
