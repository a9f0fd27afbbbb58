"""Shared Kernel - base classes for the whole domain layer.

- Entity: object with identity
- ValueObject: immutable object compared by value
- AggregateRoot: consistency boundary that records domain events
- DomainEvent: something that happened in the domain
- DomainException: business rule violation
"""

from .aggregate_root import AggregateRoot
from .domain_event import DomainEvent
from .entity import Entity
from .exceptions import (
    AggregateNotFound,
    BusinessRuleViolation,
    DomainException,
    InvalidStateTransition,
)
from .value_object import ValueObject, validate_value_object

__all__ = [
    # Base classes
    "Entity",
    "ValueObject",
    "AggregateRoot",
    "DomainEvent",
    # Utilities
    "validate_value_object",
    # Exceptions
    "DomainException",
    "BusinessRuleViolation",
    "AggregateNotFound",
    "InvalidStateTransition",
]
