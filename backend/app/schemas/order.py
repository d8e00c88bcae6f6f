"""Order schemas: storefront source data and settlement state."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class SettlementStatus(str, Enum):
    UNSETTLED = "unsettled"
    AWAITING_FUNDS = "awaiting_funds"
    SETTLED = "settled"


class LineItem(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    sku: str = Field(default="", max_length=255)
    variant_title: str = Field(default="", max_length=255)
    quantity: int = Field(default=1, ge=1)
    price: int = Field(default=0, ge=0)


class ShippingAddress(BaseModel):
    first_name: str = ""
    last_name: str = ""
    address1: str = ""
    address2: str = ""
    city: str = ""
    province: str = ""
    country: str = ""
    zip: str = ""
    phone: str = ""


class CustomerInfo(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""


class OrderCreate(BaseModel):
    external_order_id: str | None = Field(default=None, max_length=255)
    order_name: str = Field(min_length=1, max_length=255)
    store_name: str = Field(default="", max_length=255)
    currency: str = Field(default="INR", min_length=3, max_length=3)
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    shipping_address: ShippingAddress | None = None
    line_items: list[LineItem] = Field(default_factory=list)
    subtotal_price: int = Field(default=0, ge=0)
    total_price: int = Field(default=0, ge=0)


class OrderCostsUpdate(BaseModel):
    """Partial cost update; omitted fields keep their current value."""

    product_cost: int | None = Field(default=None, ge=0)
    shipping_cost: int | None = Field(default=None, ge=0)
    service_fee: int | None = Field(default=None, ge=0)


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    merchant_id: UUID
    external_order_id: str | None = None
    order_name: str
    store_name: str
    currency: str
    customer: dict
    shipping_address: dict | None = None
    line_items: list[dict]
    subtotal_price: int
    total_price: int
    product_cost: int | None = None
    shipping_cost: int | None = None
    service_fee: int | None = None
    settlement_status: SettlementStatus
    charged_amount: int | None = None
    charged_at: datetime | None = None
    shortfall: int
    wallet_transaction_id: UUID | None = None
    created_at: datetime
    updated_at: datetime
