"""Audit service for recording ledger and settlement actions."""

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.repositories.audit_log_repository import AuditLogRepository

# Audit actions
ACTION_ORDER_SETTLED = "order.settled"
ACTION_ORDER_COSTS_UPDATED = "order.costs_updated"
ACTION_SETTLEMENT_RECONCILED = "order.settlement_reconciled"
ACTION_WALLET_CREDITED = "wallet.credited"
ACTION_WALLET_ADJUSTED = "wallet.adjusted"
ACTION_FULFILLMENT_STATUS_CHANGED = "fulfillment_request.status_changed"


class AuditService:
    """Service for recording audit trail entries."""

    def __init__(self, db: Session):
        self.repo = AuditLogRepository(db)

    def log(
        self,
        action: str,
        resource_type: str,
        resource_id: UUID,
        merchant_id: UUID | None = None,
        actor_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Record an action. ``actor_id=None`` means the system acted on its own."""
        self.repo.create(
            merchant_id=merchant_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action=action,
            details=details or {},
            actor_type="user" if actor_id else "system",
            actor_id=actor_id,
        )

    def log_status_change(
        self,
        resource_type: str,
        resource_id: UUID,
        old_status: str,
        new_status: str,
        merchant_id: UUID | None = None,
        actor_id: str | None = None,
        note: str = "",
    ) -> None:
        """Log a status change event."""
        self.log(
            ACTION_FULFILLMENT_STATUS_CHANGED,
            resource_type,
            resource_id,
            merchant_id=merchant_id,
            actor_id=actor_id,
            details={"status": {"old": old_status, "new": new_status}, "note": note},
        )
