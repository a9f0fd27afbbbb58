"""Exponential backoff retry for brokerage calls.

Brokerage APIs throttle (429) and drop connections; an order should not
fail on the first transient error, and retries must back off so a degraded
brokerage is not hammered.
"""

import asyncio
import logging
from functools import wraps
from typing import Any, Awaitable, Callable, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryableError(Exception):
    """Default retryable error for callers without their own taxonomy."""

    pass


def backoff_delay(
    attempt: int, base_delay: float, max_delay: float, exponential_base: float
) -> float:
    """Delay before retry number ``attempt`` (0-based), capped at max_delay."""
    return min(base_delay * (exponential_base**attempt), max_delay)


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    retryable_exceptions: tuple[Type[BaseException], ...] = (RetryableError,),
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorator that retries an async callable on retryable exceptions.

    Any other exception propagates immediately. After ``max_retries``
    retries the last retryable exception is re-raised.

    Args:
        max_retries: Retries after the first attempt.
        base_delay: Delay before the first retry, in seconds.
        max_delay: Upper bound for a single delay.
        exponential_base: Growth factor between delays.
        retryable_exceptions: Exception types worth retrying.

    Example:
        >>> place = retry_with_backoff(
        ...     max_retries=3,
        ...     base_delay=0.5,
        ...     retryable_exceptions=TRANSIENT_BROKERAGE_ERRORS,
        ... )(adapter.place_order)
        >>> # 1st failure → wait 0.5s, 2nd → 1s, 3rd → 2s, 4th → raise
        >>> receipt = await place(...)
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        name = getattr(func, "__qualname__", getattr(func, "__name__", repr(func)))

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 0
            while True:
                try:
                    result = await func(*args, **kwargs)
                except retryable_exceptions as e:
                    if attempt >= max_retries:
                        logger.error(
                            "retry.exhausted",
                            extra={
                                "function": name,
                                "total_attempts": attempt + 1,
                                "error": str(e),
                            },
                        )
                        raise

                    delay = backoff_delay(attempt, base_delay, max_delay, exponential_base)
                    logger.warning(
                        "retry.attempt",
                        extra={
                            "function": name,
                            "attempt": attempt + 1,
                            "max_retries": max_retries,
                            "delay_seconds": delay,
                            "error": str(e),
                        },
                    )
                    await asyncio.sleep(delay)
                    attempt += 1
                    continue

                if attempt > 0:
                    logger.info(
                        "retry.success",
                        extra={"function": name, "attempt": attempt + 1},
                    )
                return result

        return wrapper

    return decorator
