"""Distributed locks."""

from .factory import build_follower_lock
from .redis_follower_lock import RedisFollowerLock

__all__ = ["RedisFollowerLock", "build_follower_lock"]
