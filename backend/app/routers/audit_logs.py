"""Audit log API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth import get_current_merchant
from app.core.database import get_db
from app.repositories.audit_log_repository import AuditLogRepository
from app.schemas.audit_log import AuditLogResponse

router = APIRouter()


@router.get(
    "/{resource_type}/{resource_id}",
    response_model=list[AuditLogResponse],
    summary="Get audit trail for a resource",
    responses={401: {"description": "Unauthorized – missing merchant identity"}},
)
async def get_resource_audit_trail(
    resource_type: str,
    resource_id: UUID,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
) -> list[AuditLogResponse]:
    """Get the audit trail of an order, ledger transaction or fulfillment request."""
    logs = AuditLogRepository(db).get_by_resource(
        resource_type, resource_id, merchant_id=merchant_id, skip=skip, limit=limit
    )
    return [AuditLogResponse.model_validate(log) for log in logs]
