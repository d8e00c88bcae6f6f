"""Repository for Notification persistence."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.notification import Notification
from app.models.shared import generate_uuid


class NotificationRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        merchant_id: UUID,
        category: str,
        title: str,
        message: str,
        resource_type: str | None = None,
        resource_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Notification:
        notification = Notification(
            id=generate_uuid(),
            merchant_id=merchant_id,
            category=category,
            title=title,
            message=message,
            resource_type=resource_type,
            resource_id=resource_id,
            metadata_=metadata or {},
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def get_all(
        self,
        merchant_id: UUID,
        skip: int = 0,
        limit: int = 50,
        category: str | None = None,
    ) -> list[Notification]:
        query = self.db.query(Notification).filter(Notification.merchant_id == merchant_id)
        if category is not None:
            query = query.filter(Notification.category == category)
        return query.order_by(Notification.created_at.desc()).offset(skip).limit(limit).all()
