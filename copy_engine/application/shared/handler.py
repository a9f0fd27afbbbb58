"""Base Handler classes for Commands and Queries."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .command import Command
from .query import Query

TCommand = TypeVar("TCommand", bound=Command)
TQuery = TypeVar("TQuery", bound=Query)
TResult = TypeVar("TResult")


class CommandHandler(ABC, Generic[TCommand, TResult]):
    """Base class for command handlers.

    A command handler:
    - Loads aggregates through the Unit of Work
    - Runs domain logic (aggregate methods, domain services)
    - Commits
    - Publishes the domain events recorded on the aggregates

    One handler = one use case. Handlers are called from the API, the
    Celery workers and tests alike.
    """

    @abstractmethod
    async def handle(self, command: TCommand) -> TResult:
        """Handle command and return result.

        Raises:
            DomainException: If a business rule is violated.
        """
        pass


class QueryHandler(ABC, Generic[TQuery, TResult]):
    """Base class for query handlers.

    Query handlers read through repositories and return DTOs.
    They MUST NOT have side effects.
    """

    @abstractmethod
    async def handle(self, query: TQuery) -> TResult:
        pass
