"""Circuit Breaker - fail fast while a brokerage connection is down.

Without a breaker every follower order waits through the full retry
sequence against a dead brokerage. With one, after N failed orders the
connection is OPEN and further orders fail immediately into FAILED.

State Machine:
CLOSED (normal) → OPEN (failing) → HALF_OPEN (probing) → CLOSED/OPEN
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(Enum):
    CLOSED = "CLOSED"  # calls pass through
    OPEN = "OPEN"  # calls rejected
    HALF_OPEN = "HALF_OPEN"  # probing recovery


class CircuitBreakerOpenError(Exception):
    """Call rejected because the circuit is OPEN."""

    pass


class CircuitBreaker:
    """Consecutive-failure circuit breaker for async calls.

    Args:
        failure_threshold: Consecutive failures that open the circuit.
        timeout_seconds: How long the circuit stays OPEN before probing.
        success_threshold: Successes in HALF_OPEN needed to close again.
        ignored_exceptions: Errors that pass through without counting as
            failures (e.g. a rejected order: the brokerage itself is up).
        name: Label used in log events.
        clock: Monotonic time source, in seconds.

    Example:
        >>> breaker = CircuitBreaker(failure_threshold=5, timeout_seconds=60)
        >>> receipt = await breaker.call(adapter.place_order, ...)
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        timeout_seconds: float = 60,
        success_threshold: int = 2,
        ignored_exceptions: tuple[Type[BaseException], ...] = (),
        name: str = "default",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.failure_threshold = failure_threshold
        self.timeout_seconds = timeout_seconds
        self.success_threshold = success_threshold
        self.ignored_exceptions = ignored_exceptions
        self.name = name
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._opened_at: float | None = None

        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    async def call(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Run ``func`` through the breaker.

        Raises:
            CircuitBreakerOpenError: If the circuit is OPEN.
            Exception: Whatever ``func`` raises.
        """
        async with self._lock:
            if self._state == CircuitState.OPEN:
                if not self._timeout_elapsed():
                    logger.warning(
                        "circuit_breaker.rejected",
                        extra={"breaker": self.name, "failure_count": self._failure_count},
                    )
                    raise CircuitBreakerOpenError(
                        f"Circuit breaker '{self.name}' is open, retry later"
                    )
                logger.info("circuit_breaker.half_open", extra={"breaker": self.name})
                self._state = CircuitState.HALF_OPEN
                self._success_count = 0

        try:
            result = await func(*args, **kwargs)
        except self.ignored_exceptions:
            raise
        except Exception:
            async with self._lock:
                self._on_failure()
            raise

        async with self._lock:
            self._on_success()
        return result

    def _on_success(self) -> None:
        if self._state == CircuitState.HALF_OPEN:
            self._success_count += 1
            if self._success_count >= self.success_threshold:
                logger.info("circuit_breaker.closed", extra={"breaker": self.name})
                self._state = CircuitState.CLOSED
                self._failure_count = 0
                self._success_count = 0
                self._opened_at = None
        else:
            self._failure_count = 0

    def _on_failure(self) -> None:
        self._failure_count += 1

        if self._state == CircuitState.HALF_OPEN:
            logger.warning(
                "circuit_breaker.reopened",
                extra={"breaker": self.name, "failure_count": self._failure_count},
            )
            self._open()
        elif self._state == CircuitState.CLOSED and self._failure_count >= self.failure_threshold:
            logger.error(
                "circuit_breaker.opened",
                extra={
                    "breaker": self.name,
                    "failure_count": self._failure_count,
                    "threshold": self.failure_threshold,
                },
            )
            self._open()

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()

    def _timeout_elapsed(self) -> bool:
        if self._opened_at is None:
            return True
        return self._clock() - self._opened_at >= self.timeout_seconds

    def reset(self) -> None:
        """Force the circuit CLOSED (tests, admin)."""
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._opened_at = None
        logger.info("circuit_breaker.manual_reset", extra={"breaker": self.name})
