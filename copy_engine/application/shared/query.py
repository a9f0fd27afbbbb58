"""Base Query class for the CQRS split.

A query reads data and has no side effects.
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class Query(ABC):
    """Base class for all queries.

    Example:
        >>> query = GetCopyOrdersQuery(follower_id=7, status=CopyOrderStatus.FAILED)
        >>> orders = await handler.handle(query)
    """

    pass
