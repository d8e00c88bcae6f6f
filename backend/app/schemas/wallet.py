"""Wallet schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.wallet_transaction import TransactionType


class WalletResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    merchant_id: UUID
    balance: int
    currency: str
    created_at: datetime
    updated_at: datetime


class WalletTopUp(BaseModel):
    """An externally confirmed credit, e.g. a captured gateway payment."""

    amount: int = Field(gt=0)
    reference_id: str = Field(min_length=1, max_length=255)
    reason: str = Field(default="Wallet top-up", min_length=1, max_length=255)
    metadata: dict = Field(default_factory=dict)


class WalletAdjustment(BaseModel):
    amount: int = Field(gt=0)
    transaction_type: TransactionType
    reason: str = Field(min_length=1, max_length=200)
    reference_id: str | None = Field(default=None, max_length=255)


class WalletTopUpResponse(BaseModel):
    wallet: WalletResponse
    transaction_id: UUID
    balance_before: int
    balance_after: int
    resumable_order_ids: list[UUID] = Field(default_factory=list)
