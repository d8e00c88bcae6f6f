"""Repairs settlement debits that never received a fulfillment request.

A settlement writes its debit and its fulfillment request in one transaction,
so the normal path never needs this. Rows written by an older deployment, or
by hand, can still leave a debit with nothing to show for it; this pass
completes those settlements without charging again.
"""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.order import SettlementStatus, can_transition
from app.models.wallet_transaction import WalletTransaction
from app.repositories.order_repository import OrderRepository
from app.repositories.wallet_transaction_repository import WalletTransactionRepository
from app.services.audit_service import ACTION_SETTLEMENT_RECONCILED, AuditService
from app.services.fulfillment_service import FulfillmentService
from app.services.settlement_service import SettlementService
from app.services.sinks import emit

logger = logging.getLogger(__name__)


class ReconciliationService:
    def __init__(self, db: Session):
        self.db = db
        self.order_repo = OrderRepository(db)
        self.txn_repo = WalletTransactionRepository(db)
        self.fulfillment_service = FulfillmentService(db)

    def reconcile(self, grace_minutes: int | None = None, limit: int | None = None) -> int:
        """Create missing fulfillment requests for orphaned settlement debits.

        Only debits older than ``grace_minutes`` are considered. Returns the
        number of settlements completed.
        """
        if grace_minutes is None:
            grace_minutes = settings.RECONCILIATION_GRACE_MINUTES
        cutoff = datetime.now(UTC) - timedelta(minutes=grace_minutes)
        debits = self.txn_repo.get_unfulfilled_debits(
            settings.SETTLEMENT_REFERENCE_PREFIX,
            created_before=cutoff,
            limit=limit or settings.RECONCILIATION_BATCH_SIZE,
        )

        repaired = 0
        for txn in debits:
            if self._complete(txn):
                repaired += 1
        if repaired:
            logger.info("Reconciled %d orphaned settlement debit(s)", repaired)
        return repaired

    def _complete(self, txn: WalletTransaction) -> bool:
        order = self.order_repo.get_by_id(txn.order_id)  # type: ignore[arg-type]
        if order is None:
            logger.error("Settlement debit %s references missing order %s", txn.id, txn.order_id)
            return False

        costs = SettlementService.resolve_costs(order)
        if costs.total != txn.amount:
            logger.warning(
                "Settlement debit %s amount %d differs from order %s costs %d; "
                "recording the charged costs",
                txn.id,
                txn.amount,
                order.id,
                costs.total,
            )
            costs = costs.model_copy(
                update={"product_cost": txn.amount - costs.shipping_cost - costs.service_fee}
            )

        settled_at: datetime = txn.created_at or datetime.now(UTC)  # type: ignore[assignment]
        try:
            if can_transition(order.settlement_status, SettlementStatus.SETTLED) and not (  # type: ignore[arg-type]
                self.order_repo.mark_settled(order.id, txn.amount, settled_at, txn.id)  # type: ignore[arg-type]
            ):
                self.db.rollback()
                logger.warning(
                    "Order %s changed state while reconciling debit %s; skipping",
                    order.id,
                    txn.id,
                )
                return False
            request = self.fulfillment_service.create_for_settlement(
                order,
                costs,
                txn,
                settled_at,
                note="Created by settlement reconciliation",
            )
            self.txn_repo.link_fulfillment_request(txn, request.id)  # type: ignore[arg-type]
            self.db.commit()
        except IntegrityError:
            # A concurrent settle() replay or another worker got there first.
            self.db.rollback()
            logger.info("Settlement debit %s already reconciled elsewhere", txn.id)
            return False

        logger.warning(
            "Completed settlement of order %s from orphaned debit %s", order.id, txn.id
        )
        emit(
            self.db,
            "Audit of settlement reconciliation",
            AuditService(self.db).log,
            action=ACTION_SETTLEMENT_RECONCILED,
            resource_type="order",
            resource_id=order.id,
            merchant_id=order.merchant_id,
            details={
                "wallet_transaction_id": str(txn.id),
                "fulfillment_request_id": str(request.id),
                "amount": txn.amount,
            },
        )
        return True
