"""Base ValueObject class for the domain model."""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True, eq=True)
class ValueObject(ABC):
    """Base class for domain value objects.

    Value objects are immutable (``frozen=True``) and compared by value.
    Override ``__post_init__`` to validate invariants at construction.

    Example:
        >>> @dataclass(frozen=True)
        ... class Money(ValueObject):
        ...     amount: Decimal
        ...
        ...     def __post_init__(self):
        ...         validate_value_object(self.amount >= 0, "Amount cannot be negative")
    """

    def __post_init__(self) -> None:
        pass


def validate_value_object(condition: bool, message: str) -> None:
    """Raise ValueError when a value object invariant does not hold.

    Args:
        condition: Condition that must be True.
        message: Error message when it is not.

    Raises:
        ValueError: If condition is False.
    """
    if not condition:
        raise ValueError(message)
