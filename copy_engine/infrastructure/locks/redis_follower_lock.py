"""Redis-backed follower lock for multi-worker deployments."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from redis.asyncio import Redis

from copy_engine.application.copying.services import FollowerLock

logger = logging.getLogger(__name__)

LOCK_KEY_PREFIX = "copy_engine:follower_lock"


class RedisFollowerLock(FollowerLock):
    """Distributed per-follower lock (redis-py Lock, SET NX with expiry).

    Args:
        redis: Async Redis client.
        timeout_seconds: Lock expiry, releases the lock of a dead worker.
        blocking_timeout_seconds: How long to wait for the lock before
            giving up with redis.exceptions.LockError.

    Example:
        >>> locks = RedisFollowerLock(Redis.from_url(settings.redis_url))
        >>> async with locks.hold(follower_id=7):
        ...     ...
    """

    def __init__(
        self,
        redis: Redis,
        timeout_seconds: float = 30,
        blocking_timeout_seconds: float | None = None,
    ) -> None:
        self._redis = redis
        self._timeout = timeout_seconds
        self._blocking_timeout = (
            blocking_timeout_seconds if blocking_timeout_seconds is not None else timeout_seconds
        )

    @staticmethod
    def key(follower_id: int) -> str:
        return f"{LOCK_KEY_PREFIX}:{follower_id}"

    @asynccontextmanager
    async def hold(self, follower_id: int) -> AsyncIterator[None]:
        lock = self._redis.lock(
            self.key(follower_id),
            timeout=self._timeout,
            blocking_timeout=self._blocking_timeout,
        )
        async with lock:
            logger.debug("follower_lock.acquired", extra={"follower_id": follower_id})
            yield
