"""Fulfillment request API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.auth import get_current_actor, get_current_merchant
from app.core.database import get_db
from app.core.errors import FulfillmentRequestNotFoundError, InvalidStatusTransitionError
from app.models.fulfillment_request import FulfillmentRequest
from app.models.fulfillment_request import FulfillmentStatus as FulfillmentStatusModel
from app.schemas.fulfillment_request import (
    FulfillmentRequestResponse,
    FulfillmentStatus,
    FulfillmentStatusUpdate,
)
from app.services.fulfillment_service import FulfillmentService

router = APIRouter()


@router.get(
    "/",
    response_model=list[FulfillmentRequestResponse],
    summary="List fulfillment requests",
    responses={401: {"description": "Unauthorized – missing merchant identity"}},
)
async def list_fulfillment_requests(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    status: FulfillmentStatus | None = None,
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
) -> list[FulfillmentRequest]:
    items, total = FulfillmentService(db).list_requests(
        merchant_id,
        skip=skip,
        limit=limit,
        status=FulfillmentStatusModel(status.value) if status else None,
    )
    response.headers["X-Total-Count"] = str(total)
    return items


@router.get(
    "/{fulfillment_request_id}",
    response_model=FulfillmentRequestResponse,
    summary="Get fulfillment request",
    responses={
        401: {"description": "Unauthorized – missing merchant identity"},
        404: {"description": "Fulfillment request not found"},
    },
)
async def get_fulfillment_request(
    fulfillment_request_id: UUID,
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
) -> FulfillmentRequest:
    try:
        return FulfillmentService(db).get(fulfillment_request_id, merchant_id)
    except FulfillmentRequestNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None


@router.post(
    "/{fulfillment_request_id}/status",
    response_model=FulfillmentRequestResponse,
    summary="Update fulfillment status",
    responses={
        400: {"description": "Status transition not allowed"},
        401: {"description": "Unauthorized – missing merchant identity"},
        404: {"description": "Fulfillment request not found"},
    },
)
async def update_fulfillment_status(
    fulfillment_request_id: UUID,
    data: FulfillmentStatusUpdate,
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
    actor_id: str | None = Depends(get_current_actor),
) -> FulfillmentRequest:
    """Move the request along its operational lifecycle and notify the merchant."""
    service = FulfillmentService(db)
    try:
        return service.update_status(
            fulfillment_request_id,
            merchant_id,
            FulfillmentStatusModel(data.status.value),
            actor_id=actor_id,
            note=data.note,
        )
    except FulfillmentRequestNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
