"""Base Command class for the CQRS split.

A command is a request to change state (write operation).
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class Command(ABC):
    """Base class for all commands.

    Commands are immutable, verb-named (ReplicateLeaderTrade,
    CancelCopyOrder) and carry data only; logic lives in the handler.

    Example:
        >>> command = CancelCopyOrderCommand(follower_id=7, copy_order_id=42)
        >>> result = await handler.handle(command)
    """

    pass
