"""Create copy engine tables.

Creates the tables the copy engine owns (copy orders, delayed copy orders,
guardrails, subscriptions) and the account tables it reads (users, broker
connections, trades, holdings).

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade database schema.

    Changes:
    1. Account tables: users, broker_connections, trades, holdings
    2. Follower configuration: copy_subscriptions, copy_guardrails
    3. Copy orders with the (leader_trade_id, follower_id) idempotency key
    4. Delayed copy orders with the (original_trade_id, follower_id) key
    """
    # ====================================
    # ACCOUNT TABLES (written by brokerage sync)
    # ====================================

    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )

    op.create_table(
        "broker_connections",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("authorization_id", sa.String(100), nullable=False, unique=True),
        sa.Column("brokerage_name", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index("ix_broker_connections_user_id", "broker_connections", ["user_id"])

    op.create_table(
        "trades",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("broker_connection_id", sa.BigInteger(), nullable=True),
        sa.Column("account_number", sa.String(64), nullable=True),
        sa.Column("external_id", sa.String(100), nullable=True, unique=True),
        sa.Column("symbol", sa.String(20), nullable=False),
        sa.Column("side", sa.String(4), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=20, scale=8), nullable=False),
        sa.Column("price", sa.Numeric(precision=20, scale=8), nullable=False),
        sa.Column("filled_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_trades_user_id", "trades", ["user_id"])
    op.create_index("ix_trades_user_filled", "trades", ["user_id", "filled_at"])
    op.create_index("ix_trades_symbol_filled", "trades", ["symbol", "filled_at"])

    op.create_table(
        "holdings",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("broker_connection_id", sa.BigInteger(), nullable=True),
        sa.Column("account_number", sa.String(64), nullable=False),
        sa.Column("symbol", sa.String(20), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=20, scale=8), nullable=False),
        sa.Column("market_value", sa.Numeric(precision=20, scale=2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.UniqueConstraint(
            "user_id", "account_number", "symbol", name="uq_holdings_account_symbol"
        ),
    )
    op.create_index("ix_holdings_user_id", "holdings", ["user_id"])

    # ====================================
    # FOLLOWER CONFIGURATION
    # ====================================

    op.create_table(
        "copy_subscriptions",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("leader_id", sa.BigInteger(), nullable=False),
        sa.Column("follower_id", sa.BigInteger(), nullable=False),
        sa.Column("auto_copy_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("paused", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("deferred_mode", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.UniqueConstraint("leader_id", "follower_id", name="uq_copy_subscriptions_pair"),
    )
    op.create_index("ix_copy_subscriptions_leader_id", "copy_subscriptions", ["leader_id"])
    op.create_index("ix_copy_subscriptions_follower_id", "copy_subscriptions", ["follower_id"])

    op.create_table(
        "copy_guardrails",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("follower_id", sa.BigInteger(), nullable=False),
        sa.Column("symbol", sa.String(20), nullable=True),
        sa.Column("max_allocation_pct", sa.Numeric(precision=6, scale=4), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.UniqueConstraint("follower_id", "symbol", name="uq_copy_guardrails_follower_symbol"),
        sa.CheckConstraint(
            "max_allocation_pct > 0 AND max_allocation_pct <= 1",
            name="ck_copy_guardrails_pct_range",
        ),
    )
    op.create_index("ix_copy_guardrails_follower_id", "copy_guardrails", ["follower_id"])

    # ====================================
    # COPY ORDERS
    # ====================================

    op.create_table(
        "copy_orders",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("leader_trade_id", sa.BigInteger(), nullable=False),
        sa.Column("follower_id", sa.BigInteger(), nullable=False),
        sa.Column("leader_id", sa.BigInteger(), nullable=False),
        sa.Column("symbol", sa.String(20), nullable=False),
        sa.Column("side", sa.String(4), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("broker_order_id", sa.String(100), nullable=True),
        sa.Column("filled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "leader_trade_id", "follower_id", name="uq_copy_orders_trade_follower"
        ),
    )
    op.create_index("ix_copy_orders_leader_trade_id", "copy_orders", ["leader_trade_id"])
    op.create_index("ix_copy_orders_follower_id", "copy_orders", ["follower_id"])
    op.create_index("ix_copy_orders_symbol", "copy_orders", ["symbol"])
    op.create_index("ix_copy_orders_status", "copy_orders", ["status"])
    op.create_index(
        "ix_copy_orders_follower_status_created",
        "copy_orders",
        ["follower_id", "status", "created_at"],
    )

    op.create_table(
        "delayed_copy_orders",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("original_trade_id", sa.BigInteger(), nullable=False),
        sa.Column("follower_id", sa.BigInteger(), nullable=False),
        sa.Column("leader_id", sa.BigInteger(), nullable=False),
        sa.Column("account_number", sa.String(64), nullable=False),
        sa.Column("symbol", sa.String(20), nullable=False),
        sa.Column("side", sa.String(4), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("scheduled_for", sa.DateTime(timezone=True), nullable=False),
        sa.Column("copy_order_id", sa.BigInteger(), nullable=True),
        sa.Column("executed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "original_trade_id", "follower_id", name="uq_delayed_copy_orders_trade_follower"
        ),
    )
    op.create_index(
        "ix_delayed_copy_orders_original_trade_id", "delayed_copy_orders", ["original_trade_id"]
    )
    op.create_index("ix_delayed_copy_orders_follower_id", "delayed_copy_orders", ["follower_id"])
    op.create_index(
        "ix_delayed_copy_orders_status_scheduled",
        "delayed_copy_orders",
        ["status", "scheduled_for"],
    )


def downgrade() -> None:
    for table in (
        "delayed_copy_orders",
        "copy_orders",
        "copy_guardrails",
        "copy_subscriptions",
        "holdings",
        "trades",
        "broker_connections",
        "users",
    ):
        op.drop_table(table)
