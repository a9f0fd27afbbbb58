"""FollowerSubscription value object."""

from dataclasses import dataclass

from copy_engine.domain.shared import ValueObject


@dataclass(frozen=True)
class FollowerSubscription(ValueObject):
    """A follower's copy settings for one leader.

    Owned by the follower's settings screen; read-only for replication.
    """

    leader_id: int
    follower_id: int
    auto_copy_enabled: bool
    paused: bool = False
    deferred_mode: bool = False

    @property
    def is_replicating(self) -> bool:
        """Whether leader trades should be copied for this follower."""
        return self.auto_copy_enabled and not self.paused
