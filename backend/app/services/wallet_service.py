"""Wallet service: the ledger write path.

Every balance change goes through ``append_debit`` or ``append_credit``, which
pair one conditional UPDATE of the wallet row with one immutable ledger row in
the same database transaction.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    DuplicateReferenceError,
    InsufficientFundsError,
    SettlementValidationError,
)
from app.models.wallet import Wallet
from app.models.wallet_transaction import TransactionType, WalletTransaction
from app.repositories.wallet_repository import WalletRepository
from app.repositories.wallet_transaction_repository import WalletTransactionRepository
from app.schemas.wallet_transaction import TransactionType as TransactionTypeSchema
from app.schemas.wallet_transaction import WalletTransactionCreate
from app.services.audit_service import (
    ACTION_WALLET_ADJUSTED,
    ACTION_WALLET_CREDITED,
    AuditService,
)
from app.services.notification_service import NotificationService
from app.services.sinks import emit

logger = logging.getLogger(__name__)


@dataclass
class TransactionPage:
    """A page of ledger rows plus the total matching the filters."""

    items: list[WalletTransaction]
    total: int


class WalletService:
    """Service for wallet balance and ledger business logic."""

    def __init__(self, db: Session):
        self.db = db
        self.wallet_repo = WalletRepository(db)
        self.txn_repo = WalletTransactionRepository(db)

    def get_or_create_wallet(self, merchant_id: UUID) -> Wallet:
        """Return the merchant's wallet, creating an empty one on first access."""
        wallet = self.wallet_repo.get_by_merchant_id(merchant_id)
        if wallet is None:
            wallet = self.wallet_repo.create(merchant_id)
            logger.info("Created wallet %s for merchant %s", wallet.id, merchant_id)
        return wallet

    def append_debit(
        self,
        merchant_id: UUID,
        amount: int,
        reference_id: str,
        reason: str,
        metadata: dict[str, Any] | None = None,
        order_id: UUID | None = None,
        commit: bool = True,
    ) -> WalletTransaction:
        """Debit ``amount`` if and only if the balance covers it.

        Raises:
            SettlementValidationError: ``amount`` is not positive.
            InsufficientFundsError: the guarded update matched no row. Nothing
                was written; the error carries the balance observed afterwards.
            DuplicateReferenceError: ``reference_id`` is already in the ledger.
                The debit has been rolled back.

        With ``commit=False`` the debit and ledger row are only flushed, and
        the caller commits them together with its own writes.
        """
        if amount <= 0:
            raise SettlementValidationError("Debit amount must be positive")

        wallet = self.get_or_create_wallet(merchant_id)
        wallet_id = wallet.id
        balance_after = self.wallet_repo.debit_if_sufficient(wallet_id, amount)  # type: ignore[arg-type]
        if balance_after is None:
            balance = self.wallet_repo.get_balance(wallet_id)  # type: ignore[arg-type]
            raise InsufficientFundsError(required=amount, balance=balance)

        try:
            txn = self.txn_repo.create(
                WalletTransactionCreate(
                    wallet_id=wallet_id,  # type: ignore[arg-type]
                    merchant_id=merchant_id,
                    transaction_type=TransactionTypeSchema.DEBIT,
                    amount=amount,
                    reason=reason,
                    reference_id=reference_id,
                    balance_before=balance_after + amount,
                    balance_after=balance_after,
                    order_id=order_id,
                    metadata=metadata or {},
                )
            )
        except IntegrityError:
            self.db.rollback()
            raise DuplicateReferenceError(reference_id) from None

        if commit:
            self.db.commit()
            self.db.refresh(txn)
        return txn

    def append_credit(
        self,
        merchant_id: UUID,
        amount: int,
        reference_id: str,
        reason: str,
        metadata: dict[str, Any] | None = None,
    ) -> tuple[WalletTransaction, bool]:
        """Credit the wallet once per ``reference_id``.

        Returns ``(transaction, created)``. A repeated reference for a credit
        of the same merchant returns the original row with ``created=False``;
        a reference already used by anything else raises
        DuplicateReferenceError.
        """
        if amount <= 0:
            raise SettlementValidationError("Credit amount must be positive")

        existing = self.txn_repo.get_by_reference_id(reference_id)
        if existing is not None:
            return self._replay_credit(existing, merchant_id, reference_id), False

        wallet = self.get_or_create_wallet(merchant_id)
        balance_after = self.wallet_repo.credit(wallet.id, amount)  # type: ignore[arg-type]
        try:
            txn = self.txn_repo.create(
                WalletTransactionCreate(
                    wallet_id=wallet.id,  # type: ignore[arg-type]
                    merchant_id=merchant_id,
                    transaction_type=TransactionTypeSchema.CREDIT,
                    amount=amount,
                    reason=reason,
                    reference_id=reference_id,
                    balance_before=balance_after - amount,
                    balance_after=balance_after,
                    metadata=metadata or {},
                )
            )
        except IntegrityError:
            # Lost a race with an identical credit; the rollback undoes our increment.
            self.db.rollback()
            existing = self.txn_repo.get_by_reference_id(reference_id)
            if existing is None:
                raise
            return self._replay_credit(existing, merchant_id, reference_id), False

        self.db.commit()
        self.db.refresh(txn)
        logger.info(
            "Credited wallet of merchant %s: %d (%s), balance %d -> %d",
            merchant_id,
            amount,
            reference_id,
            txn.balance_before,
            txn.balance_after,
        )
        emit(
            self.db,
            "Audit of wallet credit",
            AuditService(self.db).log,
            action=ACTION_WALLET_CREDITED,
            resource_type="wallet_transaction",
            resource_id=txn.id,
            merchant_id=merchant_id,
            details={"amount": amount, "reference_id": reference_id, "reason": reason},
        )
        return txn, True

    def top_up(
        self,
        merchant_id: UUID,
        amount: int,
        reference_id: str,
        reason: str = "Wallet top-up",
        metadata: dict[str, Any] | None = None,
    ) -> tuple[WalletTransaction, bool]:
        txn, created = self.append_credit(merchant_id, amount, reference_id, reason, metadata)
        if created:
            emit(
                self.db,
                "Wallet top-up notification",
                NotificationService(self.db).notify_wallet_movement,
                merchant_id=merchant_id,
                amount=amount,
                transaction_type=TransactionType.CREDIT.value,
                reason=reason,
                transaction_id=txn.id,
            )
        return txn, created

    def _replay_credit(
        self, existing: WalletTransaction, merchant_id: UUID, reference_id: str
    ) -> WalletTransaction:
        if (
            existing.transaction_type != TransactionType.CREDIT.value
            or existing.merchant_id != merchant_id
        ):
            raise DuplicateReferenceError(reference_id)
        logger.info("Credit %s already applied; replaying", reference_id)
        return existing

    def adjust(
        self,
        merchant_id: UUID,
        amount: int,
        transaction_type: TransactionType,
        reason: str,
        reference_id: str | None = None,
        actor_id: str | None = None,
    ) -> WalletTransaction:
        """Manual credit or debit by an operator. Debits never overdraw."""
        reason = reason.strip()
        if not reason:
            raise SettlementValidationError("Reason is required")
        reference_id = (
            reference_id
            or f"{settings.ADMIN_ADJUSTMENT_REFERENCE_PREFIX}_{int(time.time() * 1000)}"
        )
        metadata = {"adjusted_by": actor_id, "original_reason": reason}
        if transaction_type == TransactionType.CREDIT:
            txn, _ = self.append_credit(
                merchant_id, amount, reference_id, f"Manual adjustment: {reason}", metadata
            )
        else:
            txn = self.append_debit(
                merchant_id, amount, reference_id, f"Manual adjustment: {reason}", metadata
            )

        emit(
            self.db,
            "Audit of wallet adjustment",
            AuditService(self.db).log,
            action=ACTION_WALLET_ADJUSTED,
            resource_type="wallet_transaction",
            resource_id=txn.id,
            merchant_id=merchant_id,
            actor_id=actor_id,
            details={
                "amount": amount,
                "type": transaction_type.value,
                "reason": reason,
                "balance_before": txn.balance_before,
                "balance_after": txn.balance_after,
            },
        )
        emit(
            self.db,
            "Wallet adjustment notification",
            NotificationService(self.db).notify_wallet_movement,
            merchant_id=merchant_id,
            amount=amount,
            transaction_type=transaction_type.value,
            reason=reason,
            transaction_id=txn.id,
        )
        return txn

    def list_transactions(
        self,
        merchant_id: UUID,
        skip: int = 0,
        limit: int = 20,
        transaction_type: TransactionType | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> TransactionPage:
        wallet = self.get_or_create_wallet(merchant_id)
        items = self.txn_repo.get_by_wallet_id(
            wallet.id,  # type: ignore[arg-type]
            skip=skip,
            limit=limit,
            transaction_type=transaction_type,
            start_date=start_date,
            end_date=end_date,
        )
        total = self.txn_repo.count_by_wallet_id(
            wallet.id,  # type: ignore[arg-type]
            transaction_type=transaction_type,
            start_date=start_date,
            end_date=end_date,
        )
        return TransactionPage(items=items, total=total)
