"""Subscription Resolver - which followers copy a leader."""

import logging

from copy_engine.application.shared import UnitOfWork
from copy_engine.domain.copying.value_objects import FollowerSubscription

logger = logging.getLogger(__name__)


class SubscriptionResolver:
    """Filters a leader's subscriptions down to the replicating ones.

    A subscription replicates when auto-copy is enabled and it is not paused.
    """

    async def resolve(self, uow: UnitOfWork, leader_id: int) -> list[FollowerSubscription]:
        subscriptions = await uow.subscriptions.get_for_leader(leader_id)
        active = [s for s in subscriptions if s.is_replicating]

        logger.debug(
            "subscriptions.resolved",
            extra={
                "leader_id": leader_id,
                "total": len(subscriptions),
                "active": len(active),
            },
        )
        return active
