"""Notification API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth import get_current_merchant
from app.core.database import get_db
from app.repositories.notification_repository import NotificationRepository
from app.schemas.notification import NotificationResponse

router = APIRouter()


@router.get(
    "/",
    response_model=list[NotificationResponse],
    summary="List notifications",
    responses={401: {"description": "Unauthorized – missing merchant identity"}},
)
async def list_notifications(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
    category: str | None = None,
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
) -> list[NotificationResponse]:
    """List the merchant's notifications, newest first."""
    notifications = NotificationRepository(db).get_all(
        merchant_id, skip=skip, limit=limit, category=category
    )
    return [NotificationResponse.model_validate(n) for n in notifications]
