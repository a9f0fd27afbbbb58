"""Circuit breaker for brokerage connections."""

from .circuit_breaker import CircuitBreaker, CircuitBreakerOpenError, CircuitState

__all__ = ["CircuitBreaker", "CircuitBreakerOpenError", "CircuitState"]
