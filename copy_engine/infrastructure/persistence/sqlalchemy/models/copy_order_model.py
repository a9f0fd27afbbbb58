"""Copy order ORM models - CopyOrder and DelayedCopyOrder aggregates."""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntId


class CopyOrderModel(Base):
    """ORM model for the CopyOrder aggregate.

    Persistence only. Lifecycle rules live in domain.copying.entities.CopyOrder.
    """

    __tablename__ = "copy_orders"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)

    leader_trade_id: Mapped[int] = mapped_column(BigIntId, nullable=False, index=True)
    follower_id: Mapped[int] = mapped_column(BigIntId, nullable=False, index=True)
    leader_id: Mapped[int] = mapped_column(BigIntId, nullable=False)

    symbol: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    side: Mapped[str] = mapped_column(String(4), nullable=False)  # "BUY" | "SELL"
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    broker_order_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    filled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        # Idempotency key: one copy per leader trade and follower
        UniqueConstraint(
            "leader_trade_id", "follower_id", name="uq_copy_orders_trade_follower"
        ),
        # Query: follower history by status, newest first
        Index("ix_copy_orders_follower_status_created", "follower_id", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<CopyOrderModel(id={self.id}, follower_id={self.follower_id}, "
            f"symbol={self.symbol}, status={self.status})>"
        )


class DelayedCopyOrderModel(Base):
    """ORM model for the DelayedCopyOrder aggregate."""

    __tablename__ = "delayed_copy_orders"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)

    original_trade_id: Mapped[int] = mapped_column(BigIntId, nullable=False, index=True)
    follower_id: Mapped[int] = mapped_column(BigIntId, nullable=False, index=True)
    leader_id: Mapped[int] = mapped_column(BigIntId, nullable=False)
    account_number: Mapped[str] = mapped_column(String(64), nullable=False)

    symbol: Mapped[str] = mapped_column(String(20), nullable=False)
    side: Mapped[str] = mapped_column(String(4), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    scheduled_for: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    copy_order_id: Mapped[int | None] = mapped_column(BigIntId, nullable=True)
    executed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "original_trade_id", "follower_id", name="uq_delayed_copy_orders_trade_follower"
        ),
        # Query: due PENDING orders
        Index("ix_delayed_copy_orders_status_scheduled", "status", "scheduled_for"),
    )

    def __repr__(self) -> str:
        return (
            f"<DelayedCopyOrderModel(id={self.id}, follower_id={self.follower_id}, "
            f"status={self.status}, scheduled_for={self.scheduled_for})>"
        )
