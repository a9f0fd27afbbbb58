"""ResilientBrokerage - retry and circuit breaking around a BrokeragePort.

Order of protection for one call:
    circuit breaker (per connection) → retry with backoff → adapter

An exhausted retry sequence counts as one breaker failure. An open circuit
fails fast and is not retried.
"""

import logging
from datetime import datetime

from copy_engine.domain.brokerage.exceptions import (
    TRANSIENT_BROKERAGE_ERRORS,
    BrokerageAuthError,
    OrderRejectedError,
)
from copy_engine.domain.brokerage.ports import BrokeragePort
from copy_engine.domain.brokerage.value_objects import (
    AccountHoldings,
    BrokerActivity,
    OrderReceipt,
)

from .circuit_breakers import CircuitBreaker
from .retry import retry_with_backoff

logger = logging.getLogger(__name__)


class ResilientBrokerage(BrokeragePort):
    """BrokeragePort decorator.

    One CircuitBreaker per brokerage connection, keyed by authorization ID,
    so a revoked or failing connection never blocks other followers.
    Rejected orders and auth errors pass through the breaker uncounted.

    Example:
        >>> brokerage = ResilientBrokerage(SnapTradeAdapter(...), max_retries=3)
        >>> receipt = await brokerage.place_order("auth-1", "ACC-1", "AAPL", "BUY", 4)
    """

    def __init__(
        self,
        inner: BrokeragePort,
        max_retries: int = 3,
        base_delay: float = 0.5,
        max_delay: float = 8.0,
        failure_threshold: int = 5,
        recovery_timeout: float = 60,
        success_threshold: int = 2,
    ) -> None:
        self._inner = inner
        self._retry = retry_with_backoff(
            max_retries=max_retries,
            base_delay=base_delay,
            max_delay=max_delay,
            retryable_exceptions=TRANSIENT_BROKERAGE_ERRORS,
        )
        self._failure_threshold = failure_threshold
        self._recovery_timeout = recovery_timeout
        self._success_threshold = success_threshold
        self._breakers: dict[str, CircuitBreaker] = {}

    def breaker_for(self, authorization_id: str) -> CircuitBreaker:
        breaker = self._breakers.get(authorization_id)
        if breaker is None:
            breaker = CircuitBreaker(
                failure_threshold=self._failure_threshold,
                timeout_seconds=self._recovery_timeout,
                success_threshold=self._success_threshold,
                ignored_exceptions=(OrderRejectedError, BrokerageAuthError),
                name=f"brokerage:{authorization_id}",
            )
            self._breakers[authorization_id] = breaker
        return breaker

    async def place_order(
        self,
        authorization_id: str,
        account_number: str,
        symbol: str,
        side: str,
        quantity: int,
    ) -> OrderReceipt:
        return await self.breaker_for(authorization_id).call(
            self._retry(self._inner.place_order),
            authorization_id=authorization_id,
            account_number=account_number,
            symbol=symbol,
            side=side,
            quantity=quantity,
        )

    async def get_holdings(self, authorization_id: str) -> list[AccountHoldings]:
        return await self.breaker_for(authorization_id).call(
            self._retry(self._inner.get_holdings), authorization_id
        )

    async def get_activities(
        self, authorization_id: str, since: datetime | None = None
    ) -> list[BrokerActivity]:
        return await self.breaker_for(authorization_id).call(
            self._retry(self._inner.get_activities), authorization_id, since
        )

    async def close(self) -> None:
        await self._inner.close()
