"""Unit tests for InMemoryFollowerLock."""

import asyncio

import pytest

from copy_engine.application.copying.services import InMemoryFollowerLock


class TestInMemoryFollowerLock:
    @pytest.mark.asyncio
    async def test_entry_dropped_after_release(self):
        """Test: Registry does not grow with every follower ever seen."""
        locks = InMemoryFollowerLock()

        for follower_id in range(100):
            async with locks.hold(follower_id):
                assert locks.active_followers == 1

        assert locks.active_followers == 0

    @pytest.mark.asyncio
    async def test_entry_dropped_when_body_raises(self):
        locks = InMemoryFollowerLock()

        with pytest.raises(RuntimeError):
            async with locks.hold(7):
                raise RuntimeError("boom")

        assert locks.active_followers == 0

    @pytest.mark.asyncio
    async def test_same_follower_is_serialised(self):
        """Test: A waiter keeps the entry alive and runs after the holder."""
        # Arrange
        locks = InMemoryFollowerLock()
        order = []
        release = asyncio.Event()

        async def first():
            async with locks.hold(7):
                order.append("first.start")
                await release.wait()
                order.append("first.end")

        async def second():
            async with locks.hold(7):
                order.append("second")

        # Act
        task_1 = asyncio.create_task(first())
        await asyncio.sleep(0)
        task_2 = asyncio.create_task(second())
        await asyncio.sleep(0)

        assert locks.active_followers == 1
        assert order == ["first.start"]

        release.set()
        await asyncio.gather(task_1, task_2)

        # Assert
        assert order == ["first.start", "first.end", "second"]
        assert locks.active_followers == 0

    @pytest.mark.asyncio
    async def test_different_followers_do_not_block(self):
        locks = InMemoryFollowerLock()

        async with locks.hold(7):
            async with locks.hold(8):
                assert locks.active_followers == 2

        assert locks.active_followers == 0
