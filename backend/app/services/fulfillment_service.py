"""Fulfillment request creation and operational status lifecycle."""

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.errors import FulfillmentRequestNotFoundError, InvalidStatusTransitionError
from app.models.fulfillment_request import FulfillmentRequest, FulfillmentStatus
from app.models.order import Order
from app.models.wallet_transaction import WalletTransaction
from app.repositories.fulfillment_request_repository import FulfillmentRequestRepository
from app.schemas.settlement import CostBreakdown
from app.services.audit_service import AuditService
from app.services.notification_service import NotificationService
from app.services.sinks import emit

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"

TERMINAL_STATUSES = frozenset(
    {FulfillmentStatus.DELIVERED, FulfillmentStatus.RETURNED, FulfillmentStatus.CANCELLED}
)

MAIN_PROGRESSION = [
    FulfillmentStatus.PENDING,
    FulfillmentStatus.SOURCING,
    FulfillmentStatus.SOURCED,
    FulfillmentStatus.PACKING,
    FulfillmentStatus.PACKED,
    FulfillmentStatus.READY_FOR_DISPATCH,
    FulfillmentStatus.DISPATCHED,
    FulfillmentStatus.SHIPPED,
    FulfillmentStatus.OUT_FOR_DELIVERY,
    FulfillmentStatus.DELIVERED,
]

RTO_PROGRESSION = [
    FulfillmentStatus.RTO_INITIATED,
    FulfillmentStatus.RTO_DELIVERED,
    FulfillmentStatus.RETURNED,
]

STATUS_TIMESTAMP_COLUMNS = {
    FulfillmentStatus.SOURCED: "sourced_at",
    FulfillmentStatus.PACKED: "packed_at",
    FulfillmentStatus.DISPATCHED: "dispatched_at",
    FulfillmentStatus.SHIPPED: "shipped_at",
    FulfillmentStatus.DELIVERED: "delivered_at",
}


def valid_transitions(current: FulfillmentStatus) -> list[FulfillmentStatus]:
    """Statuses reachable from ``current``.

    Operators may jump forward along either progression but never backwards;
    a failed request can only be retried from pending or cancelled.
    """
    if current in TERMINAL_STATUSES:
        return []
    if current == FulfillmentStatus.FAILED:
        return [FulfillmentStatus.PENDING, FulfillmentStatus.CANCELLED]
    if current in RTO_PROGRESSION:
        forward = RTO_PROGRESSION[RTO_PROGRESSION.index(current) + 1 :]
        return [*forward, FulfillmentStatus.CANCELLED, FulfillmentStatus.FAILED]
    forward = MAIN_PROGRESSION[MAIN_PROGRESSION.index(current) + 1 :]
    return [
        *forward,
        FulfillmentStatus.RTO_INITIATED,
        FulfillmentStatus.CANCELLED,
        FulfillmentStatus.FAILED,
    ]


def format_shipping_address(address: dict[str, Any] | None) -> str:
    if not address:
        return ""
    name = " ".join(p for p in (address.get("first_name"), address.get("last_name")) if p)
    parts = [
        name,
        address.get("address1"),
        address.get("address2"),
        address.get("city"),
        " ".join(p for p in (address.get("province"), address.get("zip")) if p),
        address.get("country"),
        address.get("phone"),
    ]
    return ", ".join(p for p in parts if p)


def customer_name(customer: dict[str, Any] | None) -> str:
    customer = customer or {}
    name = " ".join(p for p in (customer.get("first_name"), customer.get("last_name")) if p)
    return name.strip() or "Guest"


class FulfillmentService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = FulfillmentRequestRepository(db)

    def create_for_settlement(
        self,
        order: Order,
        costs: CostBreakdown,
        txn: WalletTransaction,
        settled_at: datetime,
        actor_id: str | None = None,
        note: str = "Created from wallet settlement",
    ) -> FulfillmentRequest:
        """Insert the fulfillment request for a settled order. Flushes only.

        Customer, address and line items are copied from the order as they
        are now; later edits to the order are not reflected.
        """
        line_items: list[dict[str, Any]] = list(order.line_items or [])  # type: ignore[arg-type]
        variants = [
            {
                "title": item.get("variant_title") or item.get("title", ""),
                "sku": item.get("sku", ""),
                "quantity": int(item.get("quantity", 1)),
                "price": int(item.get("price", 0)),
            }
            for item in line_items
        ]
        skus = [v["sku"] for v in variants if v["sku"]]
        customer: dict[str, Any] = dict(order.customer or {})  # type: ignore[arg-type]
        address: dict[str, Any] = dict(order.shipping_address or {})  # type: ignore[arg-type]
        order_value = int(order.total_price or order.subtotal_price or 0)  # type: ignore[arg-type]

        return self.repo.create(
            order_id=order.id,
            merchant_id=order.merchant_id,
            order_name=order.order_name,
            store_name=order.store_name or "",
            customer_name=customer_name(customer),
            customer_email=customer.get("email") or "",
            customer_phone=customer.get("phone") or address.get("phone") or "",
            shipping_address=format_shipping_address(address),
            sku=", ".join(skus),
            variants=variants,
            item_count=sum(v["quantity"] for v in variants),
            order_value=order_value,
            product_cost=costs.product_cost,
            shipping_cost=costs.shipping_cost,
            service_fee=costs.service_fee,
            wallet_deducted_amount=txn.amount,
            profit=order_value - costs.total,
            status=FulfillmentStatus.PENDING.value,
            status_history=[
                {
                    "status": FulfillmentStatus.PENDING.value,
                    "changed_by": actor_id or SYSTEM_ACTOR,
                    "changed_at": settled_at.isoformat(),
                    "note": note,
                }
            ],
            wallet_deducted_at=settled_at,
        )

    def get(self, fulfillment_request_id: UUID, merchant_id: UUID) -> FulfillmentRequest:
        request = self.repo.get_by_id(fulfillment_request_id, merchant_id)
        if request is None:
            raise FulfillmentRequestNotFoundError(fulfillment_request_id)
        return request

    def list_requests(
        self,
        merchant_id: UUID,
        skip: int = 0,
        limit: int = 100,
        status: FulfillmentStatus | None = None,
    ) -> tuple[list[FulfillmentRequest], int]:
        items = self.repo.get_all(merchant_id, skip=skip, limit=limit, status=status)
        return items, self.repo.count(merchant_id, status=status)

    def update_status(
        self,
        fulfillment_request_id: UUID,
        merchant_id: UUID,
        status: FulfillmentStatus,
        actor_id: str | None = None,
        note: str = "",
    ) -> FulfillmentRequest:
        """Move a request along its operational lifecycle.

        Raises:
            FulfillmentRequestNotFoundError: no such request for the merchant.
            InvalidStatusTransitionError: ``status`` is not reachable from the
                current status.
        """
        request = self.get(fulfillment_request_id, merchant_id)
        current = FulfillmentStatus(request.status)
        allowed = valid_transitions(current)
        if status not in allowed:
            raise InvalidStatusTransitionError(
                current.value, status.value, [s.value for s in allowed]
            )

        now = datetime.now(UTC)
        timestamps = {"updated_at": now}
        column = STATUS_TIMESTAMP_COLUMNS.get(status)
        if column:
            timestamps[column] = now
        request = self.repo.apply_status_change(
            request,
            status,
            {
                "status": status.value,
                "changed_by": actor_id or SYSTEM_ACTOR,
                "changed_at": now.isoformat(),
                "note": note,
            },
            timestamps,
        )
        logger.info(
            "Fulfillment request %s moved %s -> %s", request.id, current.value, status.value
        )

        emit(
            self.db,
            "Fulfillment status notification",
            NotificationService(self.db).notify_fulfillment_status,
            merchant_id=request.merchant_id,
            order_name=request.order_name,
            status=status.value,
            fulfillment_request_id=request.id,
        )
        emit(
            self.db,
            "Audit of fulfillment status change",
            AuditService(self.db).log_status_change,
            resource_type="fulfillment_request",
            resource_id=request.id,
            old_status=current.value,
            new_status=status.value,
            merchant_id=request.merchant_id,
            actor_id=actor_id,
            note=note,
        )
        return request
