"""Brokerage exceptions."""

from .brokerage_exceptions import (
    TRANSIENT_BROKERAGE_ERRORS,
    BrokerageAuthError,
    BrokerageError,
    BrokerageRateLimitError,
    BrokerageUnavailableError,
    OrderRejectedError,
    OrderSubmissionUnknownError,
)

__all__ = [
    "TRANSIENT_BROKERAGE_ERRORS",
    "BrokerageAuthError",
    "BrokerageError",
    "BrokerageRateLimitError",
    "BrokerageUnavailableError",
    "OrderRejectedError",
    "OrderSubmissionUnknownError",
]
