"""SnapTrade Brokerage Adapter - implements BrokeragePort over HTTP.

Every request is signed with the platform's client ID and consumer key and
made on behalf of one user through their authorization ID.
"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from copy_engine.domain.brokerage.exceptions import (
    BrokerageAuthError,
    BrokerageError,
    BrokerageRateLimitError,
    BrokerageUnavailableError,
    OrderRejectedError,
    OrderSubmissionUnknownError,
)
from copy_engine.domain.brokerage.ports import BrokeragePort
from copy_engine.domain.brokerage.value_objects import (
    AccountHoldings,
    BrokerActivity,
    Holding,
    OrderReceipt,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.snaptrade.com/api/v1"


class SnapTradeAdapter(BrokeragePort):
    """SnapTrade REST client.

    HTTP failures are mapped onto the brokerage exception taxonomy:
    transport errors and 5xx → BrokerageUnavailableError, 429 →
    BrokerageRateLimitError, 401/403 → BrokerageAuthError, any other 4xx →
    OrderRejectedError.

    Order submission is not idempotent. Only failures before the request
    left (connect errors, pool timeouts) and 429 stay retryable; a timeout
    or 5xx after sending raises OrderSubmissionUnknownError instead.

    Example:
        >>> adapter = SnapTradeAdapter(client_id="...", consumer_key="...")
        >>> receipt = await adapter.place_order(
        ...     authorization_id="auth-1",
        ...     account_number="ACC-1",
        ...     symbol="AAPL",
        ...     side="BUY",
        ...     quantity=4,
        ... )
        >>> receipt.order_id
        'b3c1...'
        >>> await adapter.close()
    """

    def __init__(
        self,
        client_id: str,
        consumer_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize SnapTrade adapter.

        Args:
            client_id: SnapTrade client ID.
            consumer_key: SnapTrade consumer key.
            base_url: API root.
            timeout: Per-request timeout in seconds.
            transport: Custom httpx transport (tests use httpx.MockTransport).
        """
        if not client_id or not consumer_key:
            raise ValueError("SnapTrade client ID and consumer key must be set")

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={
                "SNAPTRADE-CLIENT-ID": client_id,
                "SNAPTRADE-CONSUMER-KEY": consumer_key,
            },
        )

    async def close(self) -> None:
        await self._client.aclose()

    # --- ORDERS ---

    async def place_order(
        self,
        authorization_id: str,
        account_number: str,
        symbol: str,
        side: str,
        quantity: int,
    ) -> OrderReceipt:
        logger.info(
            "snaptrade.place_order.start",
            extra={"symbol": symbol, "side": side, "quantity": quantity},
        )

        data = await self._request(
            "POST",
            f"/authorizations/{authorization_id}/accounts/{account_number}/orders",
            json={"symbol": symbol, "side": side, "quantity": quantity},
            idempotent=False,
        )

        order_id = data.get("orderId") if isinstance(data, dict) else None
        if not order_id:
            raise BrokerageError("Brokerage response has no order ID", symbol=symbol)

        logger.info(
            "snaptrade.place_order.success",
            extra={"symbol": symbol, "order_id": order_id},
        )
        return OrderReceipt(order_id=str(order_id), symbol=symbol, side=side, quantity=quantity)

    # --- ACCOUNT DATA ---

    async def get_holdings(self, authorization_id: str) -> list[AccountHoldings]:
        data = await self._request("GET", f"/authorizations/{authorization_id}/holdings")

        accounts = data.get("accounts", []) if isinstance(data, dict) else []
        return [
            AccountHoldings(
                account_id=str(account.get("id", "")),
                account_number=str(account.get("number", "")),
                holdings=tuple(
                    Holding(
                        symbol=str(holding["symbol"]).upper(),
                        quantity=_decimal(holding.get("quantity")),
                        market_value=_decimal(holding.get("marketValue")),
                        currency=holding.get("currency") or "USD",
                    )
                    for holding in account.get("holdings", [])
                ),
            )
            for account in accounts
        ]

    async def get_activities(
        self, authorization_id: str, since: datetime | None = None
    ) -> list[BrokerActivity]:
        params = {"since": since.isoformat()} if since else None
        data = await self._request(
            "GET", f"/authorizations/{authorization_id}/activities", params=params
        )
        if not isinstance(data, list):
            return []

        activities = []
        for item in data:
            if item.get("type") != "FILL":
                continue
            fill = item.get("data") or {}
            activities.append(
                BrokerActivity(
                    id=str(item["id"]),
                    account_id=str(fill.get("account_number", "")),
                    symbol=str(fill["symbol"]).upper(),
                    side=str(fill["side"]).upper(),
                    quantity=_decimal(fill.get("quantity")),
                    price=_decimal(fill.get("price")),
                    trade_date=datetime.fromisoformat(
                        str(fill.get("filled_at") or item["timestamp"]).replace("Z", "+00:00")
                    ),
                )
            )
        return activities

    # --- HELPERS ---

    async def _request(
        self, method: str, path: str, idempotent: bool = True, **kwargs: Any
    ) -> Any:
        # Unavailable is retried; after a non-idempotent send the outcome is unknown
        after_send = BrokerageUnavailableError if idempotent else OrderSubmissionUnknownError

        try:
            response = await self._client.request(method, path, **kwargs)
        except (httpx.ConnectError, httpx.ConnectTimeout, httpx.PoolTimeout) as e:
            logger.warning("snaptrade.connect_error", extra={"path": path, "error": str(e)})
            raise BrokerageUnavailableError(f"Brokerage connection failed: {e}") from e
        except httpx.TimeoutException as e:
            logger.warning("snaptrade.timeout", extra={"path": path, "error": str(e)})
            raise after_send(f"Brokerage timeout: {e}") from e
        except httpx.TransportError as e:
            logger.warning("snaptrade.network_error", extra={"path": path, "error": str(e)})
            raise after_send(f"Brokerage network error: {e}") from e

        status = response.status_code
        if status == 429:
            raise BrokerageRateLimitError("Brokerage rate limit exceeded", status_code=status)
        if status >= 500:
            raise after_send(f"Brokerage unavailable (HTTP {status})", status_code=status)
        if status in (401, 403):
            raise BrokerageAuthError(
                f"Brokerage authorization rejected (HTTP {status})", status_code=status
            )
        if status >= 400:
            raise OrderRejectedError(
                f"Brokerage rejected request: {_error_detail(response)}", status_code=status
            )

        if not response.content:
            return {}
        return response.json()


def _decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value)) if value is not None else Decimal("0")
    except InvalidOperation:
        return Decimal("0")


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("message") or body)
    return str(body)
