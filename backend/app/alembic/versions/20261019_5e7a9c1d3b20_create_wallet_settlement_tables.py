"""create wallet settlement tables

Revision ID: 5e7a9c1d3b20
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "5e7a9c1d3b20"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(updated: bool = True) -> list[sa.Column]:  # type: ignore[type-arg]
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        )
    ]
    if updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.text("(CURRENT_TIMESTAMP)"),
                nullable=True,
            )
        )
    return columns


def upgrade() -> None:
    op.create_table(
        "wallets",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("merchant_id", sa.String(length=36), nullable=False),
        sa.Column("balance", sa.BigInteger(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("balance >= 0", name="ck_wallets_balance_non_negative"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_wallets_merchant_id"), "wallets", ["merchant_id"], unique=True)

    op.create_table(
        "orders",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("merchant_id", sa.String(length=36), nullable=False),
        sa.Column("external_order_id", sa.String(length=255), nullable=True),
        sa.Column("order_name", sa.String(length=255), nullable=False),
        sa.Column("store_name", sa.String(length=255), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("customer", sa.JSON(), nullable=False),
        sa.Column("shipping_address", sa.JSON(), nullable=True),
        sa.Column("line_items", sa.JSON(), nullable=False),
        sa.Column("subtotal_price", sa.BigInteger(), nullable=False),
        sa.Column("total_price", sa.BigInteger(), nullable=False),
        sa.Column("product_cost", sa.BigInteger(), nullable=True),
        sa.Column("shipping_cost", sa.BigInteger(), nullable=True),
        sa.Column("service_fee", sa.BigInteger(), nullable=True),
        sa.Column("settlement_status", sa.String(length=20), nullable=False),
        sa.Column("charged_amount", sa.BigInteger(), nullable=True),
        sa.Column("charged_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("shortfall", sa.BigInteger(), nullable=False),
        sa.Column("wallet_transaction_id", sa.String(length=36), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "product_cost IS NULL OR product_cost >= 0", name="ck_orders_product_cost"
        ),
        sa.CheckConstraint(
            "shipping_cost IS NULL OR shipping_cost >= 0", name="ck_orders_shipping_cost"
        ),
        sa.CheckConstraint("service_fee IS NULL OR service_fee >= 0", name="ck_orders_service_fee"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_orders_merchant_id"), "orders", ["merchant_id"])
    op.create_index(op.f("ix_orders_external_order_id"), "orders", ["external_order_id"])
    op.create_index(op.f("ix_orders_settlement_status"), "orders", ["settlement_status"])
    op.create_index(
        "ix_orders_merchant_id_settlement_status", "orders", ["merchant_id", "settlement_status"]
    )

    op.create_table(
        "fulfillment_requests",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("order_id", sa.String(length=36), nullable=False),
        sa.Column("merchant_id", sa.String(length=36), nullable=False),
        sa.Column("order_name", sa.String(length=255), nullable=False),
        sa.Column("store_name", sa.String(length=255), nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=False),
        sa.Column("customer_phone", sa.String(length=50), nullable=False),
        sa.Column("shipping_address", sa.String(length=1000), nullable=False),
        sa.Column("sku", sa.String(length=1000), nullable=False),
        sa.Column("variants", sa.JSON(), nullable=False),
        sa.Column("item_count", sa.Integer(), nullable=False),
        sa.Column("order_value", sa.BigInteger(), nullable=False),
        sa.Column("product_cost", sa.BigInteger(), nullable=False),
        sa.Column("shipping_cost", sa.BigInteger(), nullable=False),
        sa.Column("service_fee", sa.BigInteger(), nullable=False),
        sa.Column("wallet_deducted_amount", sa.BigInteger(), nullable=False),
        sa.Column("profit", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False),
        sa.Column("status_history", sa.JSON(), nullable=False),
        sa.Column("wallet_deducted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sourced_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("packed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("dispatched_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("shipped_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("order_id"),
    )
    op.create_index(
        op.f("ix_fulfillment_requests_merchant_id"), "fulfillment_requests", ["merchant_id"]
    )
    op.create_index(op.f("ix_fulfillment_requests_status"), "fulfillment_requests", ["status"])
    op.create_index(
        "ix_fulfillment_requests_merchant_id_status",
        "fulfillment_requests",
        ["merchant_id", "status"],
    )
    op.create_index(
        "ix_fulfillment_requests_status_created_at",
        "fulfillment_requests",
        ["status", "created_at"],
    )

    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("wallet_id", sa.String(length=36), nullable=False),
        sa.Column("merchant_id", sa.String(length=36), nullable=False),
        sa.Column("order_id", sa.String(length=36), nullable=True),
        sa.Column("fulfillment_request_id", sa.String(length=36), nullable=True),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("transaction_type", sa.String(length=10), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=False),
        sa.Column("reference_id", sa.String(length=255), nullable=True),
        sa.Column("balance_before", sa.BigInteger(), nullable=False),
        sa.Column("balance_after", sa.BigInteger(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False),
        *_timestamps(updated=False),
        sa.CheckConstraint("amount > 0", name="ck_wallet_transactions_amount_positive"),
        sa.ForeignKeyConstraint(["wallet_id"], ["wallets.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(
            ["fulfillment_request_id"], ["fulfillment_requests.id"], ondelete="RESTRICT"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reference_id"),
    )
    op.create_index(
        op.f("ix_wallet_transactions_wallet_id"), "wallet_transactions", ["wallet_id"]
    )
    op.create_index(
        op.f("ix_wallet_transactions_merchant_id"), "wallet_transactions", ["merchant_id"]
    )
    op.create_index(op.f("ix_wallet_transactions_order_id"), "wallet_transactions", ["order_id"])
    op.create_index(
        op.f("ix_wallet_transactions_fulfillment_request_id"),
        "wallet_transactions",
        ["fulfillment_request_id"],
    )
    op.create_index(
        "ix_wallet_transactions_wallet_id_created_at",
        "wallet_transactions",
        ["wallet_id", "created_at"],
    )
    op.create_index(
        "ix_wallet_transactions_merchant_id_type",
        "wallet_transactions",
        ["merchant_id", "transaction_type"],
    )

    # orders <-> wallet_transactions reference each other.
    with op.batch_alter_table("orders") as batch_op:
        batch_op.create_foreign_key(
            "fk_orders_wallet_transaction_id",
            "wallet_transactions",
            ["wallet_transaction_id"],
            ["id"],
            ondelete="RESTRICT",
        )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("merchant_id", sa.String(length=36), nullable=True),
        sa.Column("resource_type", sa.String(length=50), nullable=False),
        sa.Column("resource_id", sa.String(length=36), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("actor_type", sa.String(length=50), nullable=False),
        sa.Column("actor_id", sa.String(length=255), nullable=True),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_audit_logs_merchant_id"), "audit_logs", ["merchant_id"])
    op.create_index(op.f("ix_audit_logs_resource_type"), "audit_logs", ["resource_type"])
    op.create_index(op.f("ix_audit_logs_resource_id"), "audit_logs", ["resource_id"])
    op.create_index(op.f("ix_audit_logs_action"), "audit_logs", ["action"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("merchant_id", sa.String(length=36), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.String(length=1000), nullable=False),
        sa.Column("resource_type", sa.String(length=50), nullable=True),
        sa.Column("resource_id", sa.String(length=36), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_notifications_merchant_id"), "notifications", ["merchant_id"])
    op.create_index(op.f("ix_notifications_category"), "notifications", ["category"])
    op.create_index(op.f("ix_notifications_is_read"), "notifications", ["is_read"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("audit_logs")
    with op.batch_alter_table("orders") as batch_op:
        batch_op.drop_constraint("fk_orders_wallet_transaction_id", type_="foreignkey")
    op.drop_table("wallet_transactions")
    op.drop_table("fulfillment_requests")
    op.drop_table("orders")
    op.drop_table("wallets")
