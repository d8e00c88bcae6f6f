"""Wallet API endpoints."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.auth import get_current_actor, get_current_merchant
from app.core.database import get_db
from app.core.errors import DuplicateReferenceError, SettlementValidationError
from app.models.wallet import Wallet
from app.models.wallet_transaction import TransactionType as TransactionTypeModel
from app.models.wallet_transaction import WalletTransaction
from app.schemas.wallet import (
    WalletAdjustment,
    WalletResponse,
    WalletTopUp,
    WalletTopUpResponse,
)
from app.schemas.wallet_transaction import TransactionType, WalletTransactionResponse
from app.services.settlement_service import SettlementService
from app.services.wallet_service import WalletService

router = APIRouter()


@router.get(
    "",
    response_model=WalletResponse,
    summary="Get wallet",
    responses={401: {"description": "Unauthorized – missing merchant identity"}},
)
async def get_wallet(
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
) -> Wallet:
    """Get the merchant's wallet, creating an empty one on first access."""
    return WalletService(db).get_or_create_wallet(merchant_id)


@router.get(
    "/transactions",
    response_model=list[WalletTransactionResponse],
    summary="List wallet transactions",
    responses={401: {"description": "Unauthorized – missing merchant identity"}},
)
async def list_wallet_transactions(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    type: TransactionType | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
) -> list[WalletTransaction]:
    """List ledger entries, newest first."""
    page = WalletService(db).list_transactions(
        merchant_id,
        skip=skip,
        limit=limit,
        transaction_type=TransactionTypeModel(type.value) if type else None,
        start_date=start_date,
        end_date=end_date,
    )
    response.headers["X-Total-Count"] = str(page.total)
    return page.items


@router.post(
    "/top_up",
    response_model=WalletTopUpResponse,
    summary="Top up wallet",
    responses={
        400: {"description": "Invalid top-up amount"},
        401: {"description": "Unauthorized – missing merchant identity"},
        409: {"description": "Reference already used by another transaction"},
    },
)
async def top_up_wallet(
    data: WalletTopUp,
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
) -> WalletTopUpResponse:
    """Credit a confirmed payment to the wallet. Repeating a reference is a no-op."""
    service = WalletService(db)
    try:
        txn, _ = service.top_up(
            merchant_id,
            data.amount,
            data.reference_id,
            reason=data.reason,
            metadata=data.metadata,
        )
    except DuplicateReferenceError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    except SettlementValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    resumable = SettlementService(db).report_resumable_orders(merchant_id)
    return WalletTopUpResponse(
        wallet=WalletResponse.model_validate(service.get_or_create_wallet(merchant_id)),
        transaction_id=txn.id,  # type: ignore[arg-type]
        balance_before=txn.balance_before,  # type: ignore[arg-type]
        balance_after=txn.balance_after,  # type: ignore[arg-type]
        resumable_order_ids=[o.id for o in resumable],  # type: ignore[misc]
    )


@router.post(
    "/adjustments",
    response_model=WalletTransactionResponse,
    status_code=201,
    summary="Manually adjust wallet",
    responses={
        400: {"description": "Invalid amount or missing reason"},
        401: {"description": "Unauthorized – missing merchant identity"},
        402: {"description": "Debit exceeds the wallet balance"},
        409: {"description": "Reference already used"},
    },
)
async def adjust_wallet(
    data: WalletAdjustment,
    db: Session = Depends(get_db),
    merchant_id: UUID = Depends(get_current_merchant),
    actor_id: str | None = Depends(get_current_actor),
) -> WalletTransaction:
    """Credit or debit the wallet by hand. A debit never takes the balance below zero."""
    service = WalletService(db)
    try:
        return service.adjust(
            merchant_id,
            data.amount,
            TransactionTypeModel(data.transaction_type.value),
            data.reason,
            reference_id=data.reference_id,
            actor_id=actor_id,
        )
    except DuplicateReferenceError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    except SettlementValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
