"""Tests for the wallet repository and WalletService ledger operations."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

from app.core.errors import (
    DuplicateReferenceError,
    InsufficientFundsError,
    SettlementValidationError,
)
from app.models.audit_log import AuditLog
from app.models.wallet import Wallet
from app.models.wallet_transaction import TransactionType, WalletTransaction
from app.repositories.notification_repository import NotificationRepository
from app.repositories.wallet_repository import WalletRepository
from app.repositories.wallet_transaction_repository import WalletTransactionRepository
from app.services.wallet_service import WalletService


@pytest.fixture
def service(db_session):
    return WalletService(db_session)


@pytest.fixture
def funded_wallet(service, merchant_id):
    """Wallet holding 10000 minor units."""
    service.append_credit(merchant_id, 10000, "seed-topup", "Wallet top-up")
    return service.get_or_create_wallet(merchant_id)


class TestWalletRepository:
    def test_create_returns_existing_wallet_on_conflict(self, db_session, merchant_id):
        """A second create for the same merchant yields the first wallet, not an error."""
        repo = WalletRepository(db_session)
        first = repo.create(merchant_id)
        second = repo.create(merchant_id)
        assert second.id == first.id
        assert db_session.query(Wallet).count() == 1

    def test_debit_if_sufficient_returns_new_balance(self, db_session, merchant_id, funded_wallet):
        repo = WalletRepository(db_session)
        assert repo.debit_if_sufficient(funded_wallet.id, 2500) == 7500
        db_session.commit()
        assert repo.get_balance(funded_wallet.id) == 7500

    def test_debit_if_sufficient_refuses_overdraft(self, db_session, funded_wallet):
        repo = WalletRepository(db_session)
        assert repo.debit_if_sufficient(funded_wallet.id, 10001) is None
        assert repo.get_balance(funded_wallet.id) == 10000

    def test_debit_of_exact_balance_reaches_zero(self, db_session, funded_wallet):
        repo = WalletRepository(db_session)
        assert repo.debit_if_sufficient(funded_wallet.id, 10000) == 0

    def test_credit_returns_new_balance(self, db_session, funded_wallet):
        repo = WalletRepository(db_session)
        assert repo.credit(funded_wallet.id, 500) == 10500


class TestGetOrCreateWallet:
    def test_creates_empty_wallet(self, service, merchant_id):
        wallet = service.get_or_create_wallet(merchant_id)
        assert wallet.merchant_id == merchant_id
        assert wallet.balance == 0
        assert wallet.currency == "INR"

    def test_returns_same_wallet(self, service, merchant_id):
        assert service.get_or_create_wallet(merchant_id).id == (
            service.get_or_create_wallet(merchant_id).id
        )

    def test_wallets_are_per_merchant(self, service, merchant_id, other_merchant_id):
        assert service.get_or_create_wallet(merchant_id).id != (
            service.get_or_create_wallet(other_merchant_id).id
        )


class TestAppendDebit:
    def test_debit_records_balances(self, service, merchant_id, funded_wallet):
        txn = service.append_debit(merchant_id, 6000, "debit-1", "Order fulfillment: #1001")
        assert txn.transaction_type == TransactionType.DEBIT.value
        assert txn.amount == 6000
        assert txn.balance_before == 10000
        assert txn.balance_after == 4000
        assert txn.reference_id == "debit-1"
        assert service.get_or_create_wallet(merchant_id).balance == 4000

    def test_insufficient_funds_writes_nothing(self, db_session, service, merchant_id, funded_wallet):
        with pytest.raises(InsufficientFundsError) as exc_info:
            service.append_debit(merchant_id, 12000, "debit-too-big", "Too big")

        err = exc_info.value
        assert err.required == 12000
        assert err.balance == 10000
        assert err.shortfall == 2000
        db_session.rollback()
        assert service.get_or_create_wallet(merchant_id).balance == 10000
        repo = WalletTransactionRepository(db_session)
        assert repo.get_by_reference_id("debit-too-big") is None

    def test_empty_wallet_is_insufficient(self, service, merchant_id):
        with pytest.raises(InsufficientFundsError) as exc_info:
            service.append_debit(merchant_id, 1, "debit-empty", "Nothing there")
        assert exc_info.value.shortfall == 1

    @pytest.mark.parametrize("amount", [0, -100])
    def test_non_positive_amount_rejected(self, service, merchant_id, funded_wallet, amount):
        with pytest.raises(SettlementValidationError):
            service.append_debit(merchant_id, amount, "debit-bad", "Bad amount")

    def test_duplicate_reference_rolls_back_debit(self, service, merchant_id, funded_wallet):
        service.append_debit(merchant_id, 1000, "debit-dup", "First")
        with pytest.raises(DuplicateReferenceError) as exc_info:
            service.append_debit(merchant_id, 1000, "debit-dup", "Second")
        assert exc_info.value.reference_id == "debit-dup"
        assert service.get_or_create_wallet(merchant_id).balance == 9000

    def test_commit_false_leaves_write_pending(self, db_session, service, merchant_id, funded_wallet):
        service.append_debit(merchant_id, 1000, "debit-pending", "Pending", commit=False)
        db_session.rollback()
        assert service.get_or_create_wallet(merchant_id).balance == 10000
        assert WalletTransactionRepository(db_session).get_by_reference_id("debit-pending") is None


class TestAppendCredit:
    def test_credit_increases_balance(self, service, merchant_id):
        txn, created = service.append_credit(merchant_id, 5000, "topup-1", "Wallet top-up")
        assert created is True
        assert txn.transaction_type == TransactionType.CREDIT.value
        assert txn.balance_before == 0
        assert txn.balance_after == 5000

    def test_repeated_reference_is_applied_once(self, db_session, service, merchant_id):
        first, _ = service.append_credit(merchant_id, 5000, "topup-2", "Wallet top-up")
        second, created = service.append_credit(merchant_id, 5000, "topup-2", "Wallet top-up")
        assert created is False
        assert second.id == first.id
        assert service.get_or_create_wallet(merchant_id).balance == 5000
        assert db_session.query(WalletTransaction).count() == 1

    def test_reference_of_a_debit_is_rejected(self, service, merchant_id, funded_wallet):
        service.append_debit(merchant_id, 100, "shared-ref", "Debit")
        with pytest.raises(DuplicateReferenceError):
            service.append_credit(merchant_id, 100, "shared-ref", "Credit")

    def test_reference_of_another_merchant_is_rejected(
        self, service, merchant_id, other_merchant_id
    ):
        service.append_credit(merchant_id, 100, "gateway-123", "Wallet top-up")
        with pytest.raises(DuplicateReferenceError):
            service.append_credit(other_merchant_id, 100, "gateway-123", "Wallet top-up")

    def test_credit_is_audited(self, db_session, service, merchant_id):
        txn, _ = service.append_credit(merchant_id, 700, "topup-audit", "Wallet top-up")
        log = db_session.query(AuditLog).filter(AuditLog.resource_id == txn.id).one()
        assert log.action == "wallet.credited"
        assert log.details["amount"] == 700

    def test_top_up_notifies_once(self, db_session, service, merchant_id):
        service.top_up(merchant_id, 250000, "pay_abc")
        service.top_up(merchant_id, 250000, "pay_abc")
        notifications = NotificationRepository(db_session).get_all(merchant_id)
        assert len(notifications) == 1
        assert notifications[0].title == "Wallet credit"
        assert "2500.00 INR" in notifications[0].message


class TestAdjust:
    def test_manual_credit(self, service, merchant_id):
        txn = service.adjust(
            merchant_id, 3000, TransactionType.CREDIT, "Goodwill", actor_id="admin-1"
        )
        assert txn.reason == "Manual adjustment: Goodwill"
        assert txn.reference_id.startswith("admin_")
        assert txn.metadata_ == {"adjusted_by": "admin-1", "original_reason": "Goodwill"}
        assert service.get_or_create_wallet(merchant_id).balance == 3000

    def test_manual_debit_cannot_overdraw(self, service, merchant_id, funded_wallet):
        with pytest.raises(InsufficientFundsError):
            service.adjust(merchant_id, 20000, TransactionType.DEBIT, "Correction")

    def test_manual_debit(self, service, merchant_id, funded_wallet):
        txn = service.adjust(
            merchant_id, 1500, TransactionType.DEBIT, "Correction", reference_id="fix-1"
        )
        assert txn.reference_id == "fix-1"
        assert txn.balance_after == 8500

    def test_blank_reason_rejected(self, service, merchant_id):
        with pytest.raises(SettlementValidationError, match="Reason is required"):
            service.adjust(merchant_id, 100, TransactionType.CREDIT, "   ")

    def test_adjustment_notifies_and_audits(self, db_session, service, merchant_id):
        txn = service.adjust(merchant_id, 100, TransactionType.CREDIT, "Refund", actor_id="a")
        notifications = NotificationRepository(db_session).get_all(merchant_id)
        assert [n.category for n in notifications] == ["wallet"]
        actions = {
            log.action
            for log in db_session.query(AuditLog).filter(AuditLog.resource_id == txn.id).all()
        }
        assert actions == {"wallet.credited", "wallet.adjusted"}

    def test_notification_failure_does_not_fail_adjustment(self, service, merchant_id):
        with patch(
            "app.services.wallet_service.NotificationService.notify_wallet_movement",
            side_effect=RuntimeError("notification store down"),
        ):
            txn = service.adjust(merchant_id, 100, TransactionType.CREDIT, "Refund")
        assert txn.balance_after == 100
        assert service.get_or_create_wallet(merchant_id).balance == 100


class TestListTransactions:
    def test_filters_by_type(self, service, merchant_id, funded_wallet):
        service.append_debit(merchant_id, 100, "d-1", "Debit")
        service.append_debit(merchant_id, 200, "d-2", "Debit")

        page = service.list_transactions(merchant_id, transaction_type=TransactionType.DEBIT)
        assert page.total == 2
        assert {t.reference_id for t in page.items} == {"d-1", "d-2"}

        page = service.list_transactions(merchant_id)
        assert page.total == 3

    def test_pagination(self, service, merchant_id, funded_wallet):
        for i in range(4):
            service.append_debit(merchant_id, 10, f"d-{i}", "Debit")
        page = service.list_transactions(merchant_id, skip=0, limit=2)
        assert len(page.items) == 2
        assert page.total == 5

    def test_date_range(self, service, merchant_id, funded_wallet):
        future = datetime.now(UTC) + timedelta(days=1)
        page = service.list_transactions(merchant_id, start_date=future)
        assert page.total == 0
        assert page.items == []

    def test_empty_for_new_merchant(self, service, other_merchant_id):
        page = service.list_transactions(other_merchant_id)
        assert page.total == 0
