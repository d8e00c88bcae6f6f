"""WalletTransaction schemas."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class WalletTransactionCreate(BaseModel):
    wallet_id: UUID
    merchant_id: UUID
    transaction_type: TransactionType
    amount: int = Field(gt=0)
    reason: str = Field(min_length=1, max_length=255)
    reference_id: str | None = Field(default=None, max_length=255)
    balance_before: int = Field(ge=0)
    balance_after: int = Field(ge=0)
    order_id: UUID | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class WalletTransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    wallet_id: UUID
    merchant_id: UUID
    order_id: UUID | None = None
    fulfillment_request_id: UUID | None = None
    amount: int
    transaction_type: str
    reason: str
    reference_id: str | None = None
    balance_before: int
    balance_after: int
    metadata: dict[str, Any] = Field(default_factory=dict, validation_alias="metadata_")
    created_at: datetime
