"""Settlement request/response schemas."""

from uuid import UUID

from pydantic import BaseModel


class CostBreakdown(BaseModel):
    product_cost: int
    shipping_cost: int
    service_fee: int

    @property
    def total(self) -> int:
        return self.product_cost + self.shipping_cost + self.service_fee


class SettlementResponse(BaseModel):
    order_id: UUID
    fulfillment_request_id: UUID | None = None
    wallet_transaction_id: UUID | None = None
    amount_charged: int
    new_balance: int
    replayed: bool = False


class InsufficientFundsResponse(BaseModel):
    detail: str
    required: int
    balance: int
    shortfall: int
