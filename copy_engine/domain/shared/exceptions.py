"""Base domain exceptions.

Domain exceptions represent business rule violations. They belong to the
domain layer and do not depend on infrastructure.
"""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain errors.

    Example:
        >>> raise DomainException("Copy order cannot be cancelled", copy_order_id=7)
    """

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize domain exception.

        Args:
            message: Human-readable error message.
            **context: Additional context (follower_id, copy_order_id, etc).
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class BusinessRuleViolation(DomainException):
    """Raised when a business rule is violated."""

    pass


class AggregateNotFound(DomainException):
    """Raised when an aggregate cannot be loaded.

    Example:
        >>> order = await uow.copy_orders.get_by_id(123)
        >>> if order is None:
        ...     raise AggregateNotFound("Copy order not found", copy_order_id=123)
    """

    pass


class InvalidStateTransition(DomainException):
    """Raised for a state machine transition that is not allowed.

    Example:
        >>> raise InvalidStateTransition(
        ...     "Cannot transition from FAILED to PLACED",
        ...     from_status="failed",
        ...     to_status="placed",
        ... )
    """

    pass
