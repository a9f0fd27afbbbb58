"""Exceptions for the Brokerage bounded context."""

from copy_engine.domain.shared import DomainException


class BrokerageError(DomainException):
    """Base exception for brokerage errors."""

    pass


class BrokerageUnavailableError(BrokerageError):
    """Network failure or 5xx from the brokerage. Transient, retry."""

    pass


class BrokerageRateLimitError(BrokerageError):
    """Brokerage answered 429. Transient, retry with backoff."""

    pass


class BrokerageAuthError(BrokerageError):
    """Authorization rejected or revoked. Not retryable."""

    pass


class OrderRejectedError(BrokerageError):
    """Brokerage refused the order (validation, buying power, halted symbol)."""

    pass


class OrderSubmissionUnknownError(BrokerageError):
    """Order request may have reached the brokerage but no answer came back.

    Raised for read/write timeouts, dropped connections and 5xx on order
    submission. Resending could place a second order, so it is terminal.
    """

    pass


# Errors worth retrying with backoff
TRANSIENT_BROKERAGE_ERRORS: tuple[type[BrokerageError], ...] = (
    BrokerageUnavailableError,
    BrokerageRateLimitError,
)
