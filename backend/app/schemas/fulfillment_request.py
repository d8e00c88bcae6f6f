"""FulfillmentRequest schemas."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class FulfillmentStatus(str, Enum):
    PENDING = "pending"
    SOURCING = "sourcing"
    SOURCED = "sourced"
    PACKING = "packing"
    PACKED = "packed"
    READY_FOR_DISPATCH = "ready_for_dispatch"
    DISPATCHED = "dispatched"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    RTO_INITIATED = "rto_initiated"
    RTO_DELIVERED = "rto_delivered"
    RETURNED = "returned"
    CANCELLED = "cancelled"
    FAILED = "failed"


class StatusHistoryEntry(BaseModel):
    status: str
    changed_by: str
    changed_at: datetime
    note: str = ""


class FulfillmentStatusUpdate(BaseModel):
    status: FulfillmentStatus
    note: str = Field(default="", max_length=1000)


class FulfillmentRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_id: UUID
    merchant_id: UUID
    order_name: str
    store_name: str
    customer_name: str
    customer_email: str
    customer_phone: str
    shipping_address: str
    sku: str
    variants: list[dict]
    item_count: int
    order_value: int
    product_cost: int
    shipping_cost: int
    service_fee: int
    wallet_deducted_amount: int
    profit: int
    status: FulfillmentStatus
    status_history: list[StatusHistoryEntry]
    wallet_deducted_at: datetime
    sourced_at: datetime | None = None
    packed_at: datetime | None = None
    dispatched_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
