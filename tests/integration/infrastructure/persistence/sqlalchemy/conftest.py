"""Fixtures for SQLAlchemy integration tests.

The engine and session factory come from the root conftest (in-memory
SQLite). Rows of the read-only account tables are inserted directly.
"""

import pytest

from copy_engine.infrastructure.persistence.sqlalchemy import unit_of_work_factory


@pytest.fixture
def seed(session_factory):
    """Insert ORM rows in their own committed transaction."""

    async def _seed(*models):
        async with session_factory() as session:
            session.add_all(models)
            await session.commit()
        return models

    return _seed


@pytest.fixture
def uow_factory(session_factory):
    return unit_of_work_factory(session_factory)
