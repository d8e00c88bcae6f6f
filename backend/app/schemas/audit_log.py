"""Pydantic schemas for AuditLog."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    id: UUID
    merchant_id: UUID | None
    resource_type: str
    resource_id: UUID
    action: str
    details: dict[str, Any]
    actor_type: str
    actor_id: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
