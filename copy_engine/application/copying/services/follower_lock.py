"""Per-follower single-writer lock.

Everything between reading a follower's NAV and writing their copy order runs
under this lock, so two leader trades cannot size against the same stale NAV.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator


class FollowerLock(ABC):
    """Mutual exclusion keyed by follower ID.

    Implementations:
    - InMemoryFollowerLock (one process)
    - RedisFollowerLock (several Celery workers)
    """

    @abstractmethod
    def hold(self, follower_id: int) -> AsyncContextManager[None]:
        """Async context manager that holds the follower's lock."""
        pass


class InMemoryFollowerLock(FollowerLock):
    """asyncio.Lock registry. Only serialises within one event loop.

    A follower's entry is dropped once its last holder or waiter leaves.
    """

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, follower_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(follower_id, asyncio.Lock())
        self._users[follower_id] = self._users.get(follower_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[follower_id] -= 1
            if self._users[follower_id] == 0:
                del self._users[follower_id]
                del self._locks[follower_id]

    @property
    def active_followers(self) -> int:
        """Followers with a current holder or waiter."""
        return len(self._locks)
