"""Follower lock construction from settings."""

from redis.asyncio import Redis

from copy_engine.application.copying.services import FollowerLock, InMemoryFollowerLock
from copy_engine.config import Settings

from .redis_follower_lock import RedisFollowerLock


def build_follower_lock(settings: Settings) -> FollowerLock:
    """Redis lock when API and workers run as separate processes, else in-memory."""
    if settings.follower_lock_backend == "redis":
        return RedisFollowerLock(
            Redis.from_url(settings.redis_url),
            timeout_seconds=settings.follower_lock_timeout_seconds,
        )
    return InMemoryFollowerLock()
