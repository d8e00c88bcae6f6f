"""Repository for AuditLog persistence."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog
from app.models.shared import generate_uuid


class AuditLogRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        resource_type: str,
        resource_id: UUID,
        action: str,
        details: dict[str, Any],
        actor_type: str,
        actor_id: str | None = None,
        merchant_id: UUID | None = None,
    ) -> AuditLog:
        audit_log = AuditLog(
            id=generate_uuid(),
            merchant_id=merchant_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action=action,
            details=details,
            actor_type=actor_type,
            actor_id=actor_id,
        )
        self.db.add(audit_log)
        self.db.commit()
        self.db.refresh(audit_log)
        return audit_log

    def get_by_resource(
        self,
        resource_type: str,
        resource_id: UUID,
        merchant_id: UUID | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditLog]:
        query = self.db.query(AuditLog).filter(
            AuditLog.resource_type == resource_type,
            AuditLog.resource_id == resource_id,
        )
        if merchant_id is not None:
            query = query.filter(AuditLog.merchant_id == merchant_id)
        return (
            query.order_by(AuditLog.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
