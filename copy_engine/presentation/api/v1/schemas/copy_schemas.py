"""Pydantic schemas for the copy trading API."""

from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ============================================================================
# REQUEST SCHEMAS
# ============================================================================


class LeaderTradeRequest(BaseModel):
    """A confirmed leader fill. Field names follow the upstream event (camelCase).

    Example:
        {
            "leaderId": 1,
            "brokerConnectionId": 10,
            "accountNumber": "ACC-1",
            "symbol": "AAPL",
            "side": "BUY",
            "quantity": 25,
            "fillPrice": "200.00",
            "filledAt": "2026-03-02T15:00:00Z"
        }
    """

    model_config = ConfigDict(populate_by_name=True)

    leader_id: int = Field(..., alias="leaderId", gt=0)
    broker_connection_id: int = Field(..., alias="brokerConnectionId", gt=0)
    account_number: str = Field(..., alias="accountNumber", min_length=1)
    symbol: str = Field(..., min_length=1, max_length=32)
    side: str
    quantity: int = Field(..., gt=0)
    fill_price: Decimal = Field(..., alias="fillPrice", gt=0)
    filled_at: datetime = Field(..., alias="filledAt")

    @field_validator("side")
    @classmethod
    def validate_side(cls, v: str) -> str:
        if v.upper() not in ("BUY", "SELL"):
            raise ValueError("side must be 'BUY' or 'SELL'")
        return v.upper()

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("filled_at")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    def to_task_payload(self) -> dict:
        """JSON-safe payload for the replicate_leader_trade task."""
        return {
            "leader_id": self.leader_id,
            "broker_connection_id": self.broker_connection_id,
            "account_number": self.account_number,
            "symbol": self.symbol,
            "side": self.side,
            "quantity": self.quantity,
            "fill_price": str(self.fill_price),
            "filled_at": self.filled_at.isoformat(),
        }


class GuardrailRequest(BaseModel):
    """Upsert a guardrail. Omit ``symbol`` for the follower's global cap."""

    symbol: str | None = Field(default=None, max_length=32)
    max_allocation_pct: Decimal = Field(
        ..., description="Maximum fraction of NAV, within (0, 1]"
    )

    model_config = {"json_schema_extra": {"example": {
        "symbol": "TSLA",
        "max_allocation_pct": "0.10",
    }}}


class ConfirmFillRequest(BaseModel):
    filled_at: datetime | None = None


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================


class LeaderTradeAcceptedResponse(BaseModel):
    task_id: str
    status: str = "queued"


class CopyOrderResponse(BaseModel):
    id: int
    leader_trade_id: int
    follower_id: int
    leader_id: int
    symbol: str
    side: str
    quantity: int
    status: str
    broker_order_id: str | None = None
    filled_at: datetime | None = None
    error_message: str | None = None
    created_at: datetime


class DelayedCopyOrderResponse(BaseModel):
    id: int
    original_trade_id: int
    follower_id: int
    leader_id: int
    symbol: str
    side: str
    quantity: int
    status: str
    scheduled_for: datetime
    copy_order_id: int | None = None
    executed_at: datetime | None = None
    error_message: str | None = None


class GuardrailResponse(BaseModel):
    follower_id: int
    symbol: str | None = None
    max_allocation_pct: Decimal


class SymbolCount(BaseModel):
    symbol: str
    count: int


class CopyTradingStatsResponse(BaseModel):
    follower_id: int
    total_orders: int
    queued_orders: int
    placed_orders: int
    filled_orders: int
    failed_orders: int
    cancelled_orders: int
    success_rate: Decimal
    most_copied_symbols: list[SymbolCount]


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: dict | None = None
