"""Follower configuration ORM models - subscriptions and guardrails."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, BigIntId


class CopySubscriptionModel(Base):
    """A follower's copy settings for one leader."""

    __tablename__ = "copy_subscriptions"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    leader_id: Mapped[int] = mapped_column(BigIntId, nullable=False, index=True)
    follower_id: Mapped[int] = mapped_column(BigIntId, nullable=False, index=True)

    auto_copy_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    paused: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deferred_mode: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("leader_id", "follower_id", name="uq_copy_subscriptions_pair"),
    )


class CopyGuardrailModel(Base):
    """Per-follower allocation cap; ``symbol`` NULL is the global cap."""

    __tablename__ = "copy_guardrails"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    follower_id: Mapped[int] = mapped_column(BigIntId, nullable=False, index=True)
    symbol: Mapped[str | None] = mapped_column(String(20), nullable=True)
    max_allocation_pct: Mapped[Decimal] = mapped_column(
        Numeric(precision=6, scale=4), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("follower_id", "symbol", name="uq_copy_guardrails_follower_symbol"),
    )
