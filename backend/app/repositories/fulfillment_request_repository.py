"""FulfillmentRequest repository for data access."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.fulfillment_request import FulfillmentRequest, FulfillmentStatus


class FulfillmentRequestRepository:
    """Repository for FulfillmentRequest model."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, **fields: Any) -> FulfillmentRequest:
        """Insert a request. Flushes only; a second request for the same order fails the flush."""
        request = FulfillmentRequest(**fields)
        self.db.add(request)
        self.db.flush()
        return request

    def get_by_id(
        self, fulfillment_request_id: UUID, merchant_id: UUID | None = None
    ) -> FulfillmentRequest | None:
        query = self.db.query(FulfillmentRequest).filter(
            FulfillmentRequest.id == fulfillment_request_id
        )
        if merchant_id is not None:
            query = query.filter(FulfillmentRequest.merchant_id == merchant_id)
        return query.first()

    def get_by_order_id(self, order_id: UUID) -> FulfillmentRequest | None:
        return (
            self.db.query(FulfillmentRequest)
            .filter(FulfillmentRequest.order_id == order_id)
            .first()
        )

    def get_all(
        self,
        merchant_id: UUID,
        skip: int = 0,
        limit: int = 100,
        status: FulfillmentStatus | None = None,
    ) -> list[FulfillmentRequest]:
        query = self.db.query(FulfillmentRequest).filter(
            FulfillmentRequest.merchant_id == merchant_id
        )
        if status is not None:
            query = query.filter(FulfillmentRequest.status == status.value)
        return query.order_by(FulfillmentRequest.created_at.desc()).offset(skip).limit(limit).all()

    def count(self, merchant_id: UUID, status: FulfillmentStatus | None = None) -> int:
        query = self.db.query(FulfillmentRequest).filter(
            FulfillmentRequest.merchant_id == merchant_id
        )
        if status is not None:
            query = query.filter(FulfillmentRequest.status == status.value)
        return query.count()

    def apply_status_change(
        self,
        request: FulfillmentRequest,
        status: FulfillmentStatus,
        history_entry: dict[str, Any],
        timestamps: dict[str, datetime],
    ) -> FulfillmentRequest:
        request.status = status.value  # type: ignore[assignment]
        # Reassign rather than append so the JSON column is flagged dirty.
        request.status_history = [*(request.status_history or []), history_entry]  # type: ignore[assignment]
        for column, value in timestamps.items():
            setattr(request, column, value)
        self.db.commit()
        self.db.refresh(request)
        return request
