"""Retry logic with exponential backoff."""

from .exponential_backoff import RetryableError, backoff_delay, retry_with_backoff

__all__ = ["RetryableError", "backoff_delay", "retry_with_backoff"]
