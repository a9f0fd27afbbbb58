"""Copying domain exceptions."""

from copy_engine.domain.shared import (
    AggregateNotFound,
    BusinessRuleViolation,
    InvalidStateTransition,
)


class InvalidCopyOrderStateError(InvalidStateTransition):
    """Copy order transition not allowed by the lifecycle.

    Example:
        >>> order.status == CopyOrderStatus.PLACED
        >>> order.cancel()  # raises InvalidCopyOrderStateError
    """

    pass


class InvalidDelayedCopyStateError(InvalidStateTransition):
    """Delayed copy order is no longer pending."""

    pass


class InvalidCopyQuantityError(BusinessRuleViolation):
    """Copy order quantity must be a whole number of at least 1."""

    pass


class InvalidGuardrailError(BusinessRuleViolation):
    """Guardrail allocation outside (0, 1]. Rejected at configuration time."""

    pass


class InvalidLeaderTradeError(BusinessRuleViolation):
    """Leader trade event failed validation."""

    pass


class CopyOrderNotFoundError(AggregateNotFound):
    """Copy order does not exist or belongs to another follower."""

    pass


class GuardrailNotFoundError(AggregateNotFound):
    """No guardrail configured for the follower and symbol."""

    pass


class DuplicateCopyOrderError(BusinessRuleViolation):
    """A copy order already exists for this leader trade and follower."""

    pass
