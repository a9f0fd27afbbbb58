"""Shared Application Layer components."""

from .clock import Clock, utcnow
from .command import Command
from .handler import CommandHandler, QueryHandler
from .query import Query
from .unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "Clock",
    "utcnow",
    "Command",
    "Query",
    "CommandHandler",
    "QueryHandler",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
