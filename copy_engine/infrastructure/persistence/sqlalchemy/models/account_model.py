"""Account ORM models - users, brokerage connections, fills and holdings.

Written by the brokerage sync; the copy engine only reads them.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntId


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class BrokerConnectionModel(Base):
    """A user's authorised link to a brokerage."""

    __tablename__ = "broker_connections"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, nullable=False, index=True)
    authorization_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    brokerage_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class TradeModel(Base):
    """A fill reported by the brokerage, for leaders and followers alike."""

    __tablename__ = "trades"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, nullable=False, index=True)
    broker_connection_id: Mapped[int | None] = mapped_column(BigIntId, nullable=True)
    account_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    external_id: Mapped[str | None] = mapped_column(String(100), nullable=True, unique=True)

    symbol: Mapped[str] = mapped_column(String(20), nullable=False)
    side: Mapped[str] = mapped_column(String(4), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=8), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=8), nullable=False)
    filled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        # Query: user fills since a date (daily P&L, Kelly history)
        Index("ix_trades_user_filled", "user_id", "filled_at"),
        # Query: recent fills in a symbol (momentum)
        Index("ix_trades_symbol_filled", "symbol", "filled_at"),
    )


class HoldingModel(Base):
    """Current position in one account; NAV is the sum of market values."""

    __tablename__ = "holdings"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntId, nullable=False, index=True)
    broker_connection_id: Mapped[int | None] = mapped_column(BigIntId, nullable=True)
    account_number: Mapped[str] = mapped_column(String(64), nullable=False)

    symbol: Mapped[str] = mapped_column(String(20), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=8), nullable=False)
    market_value: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=2), nullable=False
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint(
            "user_id", "account_number", "symbol", name="uq_holdings_account_symbol"
        ),
    )
