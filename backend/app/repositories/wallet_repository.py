"""Wallet repository for data access.

``debit_if_sufficient`` and ``credit`` are the only code paths that write
``Wallet.balance``. Both are single UPDATE statements evaluated by the
database against the latest committed row, and neither commits: the caller
writes the matching ledger row and commits both together.
"""

from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.wallet import Wallet


class WalletRepository:
    """Repository for Wallet model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_merchant_id(self, merchant_id: UUID) -> Wallet | None:
        return self.db.query(Wallet).filter(Wallet.merchant_id == merchant_id).first()

    def create(self, merchant_id: UUID) -> Wallet:
        """Create an empty wallet, or return the one a concurrent request created first."""
        wallet = Wallet(merchant_id=merchant_id, balance=0)
        self.db.add(wallet)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.get_by_merchant_id(merchant_id)
            if existing is None:
                raise
            return existing
        self.db.refresh(wallet)
        return wallet

    def get_balance(self, wallet_id: UUID) -> int:
        balance = self.db.query(Wallet.balance).filter(Wallet.id == wallet_id).scalar()
        return int(balance or 0)

    def debit_if_sufficient(self, wallet_id: UUID, amount: int) -> int | None:
        """Decrement the balance by ``amount`` only if it stays non-negative.

        Returns the balance after the debit, or ``None`` when the guard
        ``balance >= amount`` did not hold and nothing was changed.
        """
        stmt = (
            update(Wallet)
            .where(Wallet.id == wallet_id, Wallet.balance >= amount)
            .values(balance=Wallet.balance - amount)
            .returning(Wallet.balance)
            .execution_options(synchronize_session=False)
        )
        balance_after = self.db.execute(stmt).scalar_one_or_none()
        return None if balance_after is None else int(balance_after)

    def credit(self, wallet_id: UUID, amount: int) -> int:
        """Increment the balance by ``amount`` and return the new balance."""
        stmt = (
            update(Wallet)
            .where(Wallet.id == wallet_id)
            .values(balance=Wallet.balance + amount)
            .returning(Wallet.balance)
            .execution_options(synchronize_session=False)
        )
        return int(self.db.execute(stmt).scalar_one())
