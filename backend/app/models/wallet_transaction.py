"""WalletTransaction model: the append-only wallet ledger."""

from enum import Enum

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, ForeignKey, Index, String, func

from app.core.database import Base
from app.models.shared import MinorUnits, UUIDType, generate_uuid


class TransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class WalletTransaction(Base):
    """One balance-affecting event.

    Rows are never updated except for ``fulfillment_request_id``, which is
    back-filled in the same database transaction that creates the fulfillment
    request. ``reference_id`` is the idempotency key and is unique.
    """

    __tablename__ = "wallet_transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_wallet_transactions_amount_positive"),
        Index("ix_wallet_transactions_wallet_id_created_at", "wallet_id", "created_at"),
        Index("ix_wallet_transactions_merchant_id_type", "merchant_id", "transaction_type"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    wallet_id = Column(
        UUIDType, ForeignKey("wallets.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    merchant_id = Column(UUIDType, nullable=False, index=True)
    order_id = Column(
        UUIDType, ForeignKey("orders.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    fulfillment_request_id = Column(
        UUIDType,
        ForeignKey("fulfillment_requests.id", ondelete="RESTRICT", use_alter=True),
        nullable=True,
        index=True,
    )
    amount = Column(MinorUnits, nullable=False)
    transaction_type = Column(String(10), nullable=False)
    reason = Column(String(255), nullable=False)
    reference_id = Column(String(255), nullable=True, unique=True)
    balance_before = Column(MinorUnits, nullable=False)
    balance_after = Column(MinorUnits, nullable=False)
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
