"""FulfillmentRequest model: the operational record created by a settlement."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, func

from app.core.database import Base
from app.models.shared import MinorUnits, UUIDType, generate_uuid


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


class FulfillmentRequest(Base):
    """Snapshot of a settled order handed to fulfillment operations.

    Customer, address and line items are copied at settlement time and do
    not follow later edits of the order. ``order_id`` is unique: a second
    request for the same order cannot be inserted.
    """

    __tablename__ = "fulfillment_requests"
    __table_args__ = (
        Index("ix_fulfillment_requests_merchant_id_status", "merchant_id", "status"),
        Index("ix_fulfillment_requests_status_created_at", "status", "created_at"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    order_id = Column(
        UUIDType, ForeignKey("orders.id", ondelete="RESTRICT"), nullable=False, unique=True
    )
    merchant_id = Column(UUIDType, nullable=False, index=True)

    order_name = Column(String(255), nullable=False)
    store_name = Column(String(255), nullable=False, default="")
    customer_name = Column(String(255), nullable=False, default="Guest")
    customer_email = Column(String(255), nullable=False, default="")
    customer_phone = Column(String(50), nullable=False, default="")
    shipping_address = Column(String(1000), nullable=False, default="")

    sku = Column(String(1000), nullable=False, default="")
    variants = Column(JSON, nullable=False, default=list)
    item_count = Column(Integer, nullable=False, default=0)

    order_value = Column(MinorUnits, nullable=False, default=0)
    product_cost = Column(MinorUnits, nullable=False, default=0)
    shipping_cost = Column(MinorUnits, nullable=False, default=0)
    service_fee = Column(MinorUnits, nullable=False, default=0)
    wallet_deducted_amount = Column(MinorUnits, nullable=False)
    profit = Column(MinorUnits, nullable=False, default=0)

    status = Column(String(30), nullable=False, default=FulfillmentStatus.PENDING.value, index=True)
    status_history = Column(JSON, nullable=False, default=list)

    wallet_deducted_at = Column(DateTime(timezone=True), nullable=False)
    sourced_at = Column(DateTime(timezone=True), nullable=True)
    packed_at = Column(DateTime(timezone=True), nullable=True)
    dispatched_at = Column(DateTime(timezone=True), nullable=True)
    shipped_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
