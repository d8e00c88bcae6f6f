"""WalletTransaction repository for data access."""

from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Query, Session

from app.models.fulfillment_request import FulfillmentRequest
from app.models.wallet_transaction import TransactionType, WalletTransaction
from app.schemas.wallet_transaction import WalletTransactionCreate


class WalletTransactionRepository:
    """Repository for WalletTransaction model.

    Writes only flush; the owning service commits so the ledger row lands in
    the same database transaction as the balance change it records.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: WalletTransactionCreate) -> WalletTransaction:
        """Append a ledger row. A duplicate ``reference_id`` raises IntegrityError on flush."""
        txn = WalletTransaction(
            wallet_id=data.wallet_id,
            merchant_id=data.merchant_id,
            order_id=data.order_id,
            amount=data.amount,
            transaction_type=data.transaction_type.value,
            reason=data.reason,
            reference_id=data.reference_id,
            balance_before=data.balance_before,
            balance_after=data.balance_after,
            metadata_=data.metadata,
        )
        self.db.add(txn)
        self.db.flush()
        return txn

    def get_by_reference_id(self, reference_id: str) -> WalletTransaction | None:
        return (
            self.db.query(WalletTransaction)
            .filter(WalletTransaction.reference_id == reference_id)
            .first()
        )

    def _filtered(
        self,
        wallet_id: UUID,
        transaction_type: TransactionType | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Query:  # type: ignore[type-arg]
        query = self.db.query(WalletTransaction).filter(WalletTransaction.wallet_id == wallet_id)
        if transaction_type is not None:
            query = query.filter(WalletTransaction.transaction_type == transaction_type.value)
        if start_date is not None:
            query = query.filter(WalletTransaction.created_at >= start_date)
        if end_date is not None:
            query = query.filter(WalletTransaction.created_at <= end_date)
        return query

    def get_by_wallet_id(
        self,
        wallet_id: UUID,
        skip: int = 0,
        limit: int = 100,
        transaction_type: TransactionType | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[WalletTransaction]:
        """Get a page of ledger rows for a wallet, newest first."""
        return (
            self._filtered(wallet_id, transaction_type, start_date, end_date)
            .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_wallet_id(
        self,
        wallet_id: UUID,
        transaction_type: TransactionType | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> int:
        return self._filtered(wallet_id, transaction_type, start_date, end_date).count()

    def link_fulfillment_request(
        self, txn: WalletTransaction, fulfillment_request_id: UUID
    ) -> WalletTransaction:
        txn.fulfillment_request_id = fulfillment_request_id  # type: ignore[assignment]
        self.db.flush()
        return txn

    def get_unfulfilled_debits(
        self,
        reference_prefix: str,
        created_before: datetime,
        limit: int = 100,
    ) -> list[WalletTransaction]:
        """Settlement debits with no fulfillment request for their order."""
        has_request = (
            self.db.query(FulfillmentRequest.id)
            .filter(FulfillmentRequest.order_id == WalletTransaction.order_id)
            .exists()
        )
        return (
            self.db.query(WalletTransaction)
            .filter(
                WalletTransaction.transaction_type == TransactionType.DEBIT.value,
                WalletTransaction.reference_id.like(f"{reference_prefix}:%"),
                WalletTransaction.order_id.isnot(None),
                WalletTransaction.created_at <= created_before,
                ~has_request,
            )
            .order_by(WalletTransaction.created_at.asc())
            .limit(limit)
            .all()
        )
