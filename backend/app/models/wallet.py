"""Wallet model: one prepaid balance per merchant."""

from sqlalchemy import CheckConstraint, Column, DateTime, String, func

from app.core.config import settings
from app.core.database import Base
from app.models.shared import MinorUnits, UUIDType, generate_uuid


class Wallet(Base):
    """Per-merchant balance in minor units.

    ``balance`` is only ever written through the ledger repository's
    conditional updates; the CHECK constraint is a last line against a
    negative balance reaching disk.
    """

    __tablename__ = "wallets"
    __table_args__ = (CheckConstraint("balance >= 0", name="ck_wallets_balance_non_negative"),)

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    merchant_id = Column(UUIDType, nullable=False, unique=True, index=True)
    balance = Column(MinorUnits, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default=lambda: settings.WALLET_CURRENCY)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
