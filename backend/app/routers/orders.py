"""Order API endpoints: ingestion, cost configuration and settlement."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.auth import get_current_actor, get_current_merchant
from app.core.database import get_db
from app.core.errors import (
    CostsNotEditableError,
    OrderNotFoundError,
    SettlementConflictError,
    SettlementValidationError,
)
from app.models.order import Order
from app.models.order import SettlementStatus as SettlementStatusModel
from app.repositories.order_repository import OrderRepository
from app.schemas.order import OrderCostsUpdate, OrderCreate, OrderResponse, SettlementStatus
from app.schemas.settlement import InsufficientFundsResponse, SettlementResponse
from app.services.settlement_service import SettlementService

router = APIRouter()


@router.post(
    "/",
    response_model=OrderResponse,
    status_code=201,
    summary="Register order",
    responses={
        401: {"description": "Unauthorized – missing merchant identity"},
        422: {"description": "Validation error"},
    },
)
async def create_order(
    data: OrderCreate,
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
) -> Order:
    """Register storefront order data so it can be settled from the wallet."""
    return OrderRepository(db).create(merchant_id, data)


@router.get(
    "/",
    response_model=list[OrderResponse],
    summary="List orders",
    responses={401: {"description": "Unauthorized – missing merchant identity"}},
)
async def list_orders(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    settlement_status: SettlementStatus | None = None,
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
) -> list[Order]:
    """List orders with an optional settlement status filter."""
    repo = OrderRepository(db)
    status = SettlementStatusModel(settlement_status.value) if settlement_status else None
    response.headers["X-Total-Count"] = str(repo.count(merchant_id, settlement_status=status))
    return repo.get_all(merchant_id, skip=skip, limit=limit, settlement_status=status)


@router.get(
    "/resumable",
    response_model=list[OrderResponse],
    summary="List resumable orders",
    responses={401: {"description": "Unauthorized – missing merchant identity"}},
)
async def list_resumable_orders(
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
) -> list[Order]:
    """Orders awaiting funds whose costs the current balance would cover, each on its own."""
    return SettlementService(db).find_resumable_orders(merchant_id)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order",
    responses={
        401: {"description": "Unauthorized – missing merchant identity"},
        404: {"description": "Order not found"},
    },
)
async def get_order(
    order_id: UUID,
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
) -> Order:
    order = OrderRepository(db).get_by_id(order_id, merchant_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.put(
    "/{order_id}/costs",
    response_model=OrderResponse,
    summary="Set order costs",
    responses={
        400: {"description": "Negative cost"},
        401: {"description": "Unauthorized – missing merchant identity"},
        404: {"description": "Order not found"},
        409: {"description": "Order already settled"},
    },
)
async def set_order_costs(
    order_id: UUID,
    data: OrderCostsUpdate,
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
    actor_id: str | None = Depends(get_current_actor),
) -> Order:
    """Set product, shipping and fee costs. Omitted fields are left unchanged."""
    service = SettlementService(db)
    try:
        return service.set_costs(order_id, data, merchant_id=merchant_id, actor_id=actor_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except CostsNotEditableError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    except SettlementValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None


@router.post(
    "/{order_id}/settle",
    response_model=SettlementResponse,
    summary="Settle order from wallet",
    responses={
        400: {"description": "Order has nothing to charge"},
        401: {"description": "Unauthorized – missing merchant identity"},
        402: {"model": InsufficientFundsResponse, "description": "Insufficient wallet balance"},
        404: {"description": "Order not found"},
        409: {"description": "Order changed during settlement; retry"},
    },
)
async def settle_order(
    order_id: UUID,
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
    actor_id: str | None = Depends(get_current_actor),
) -> SettlementResponse:
    """Debit the wallet and create the fulfillment request. Safe to retry."""
    service = SettlementService(db)
    try:
        result = service.settle(order_id, merchant_id=merchant_id, actor_id=actor_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except SettlementConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    except SettlementValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    return SettlementResponse(
        order_id=result.order_id,
        fulfillment_request_id=result.fulfillment_request_id,
        wallet_transaction_id=result.wallet_transaction_id,
        amount_charged=result.amount_charged,
        new_balance=result.new_balance,
        replayed=result.replayed,
    )
