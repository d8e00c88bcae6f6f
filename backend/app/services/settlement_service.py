"""Settlement engine: turns an order's costs into one wallet debit plus a fulfillment request.

There is no lock anywhere in this module. Exactly-once charging rests on
three database guarantees:

* the wallet debit is a conditional UPDATE that never lets the balance go
  negative, so two settlements cannot spend the same money;
* ``wallet_transactions.reference_id`` is unique and every settlement of an
  order uses the same key, ``"<prefix>:<order_id>"``;
* ``fulfillment_requests.order_id`` is unique.

The debit, its ledger row, the order's settled state and the fulfillment
request are written in a single database transaction. A settlement that loses
a race is rolled back as a whole, balance decrement included, and then
replays the winner's outcome.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    CostsNotEditableError,
    DuplicateReferenceError,
    InsufficientFundsError,
    OrderNotFoundError,
    SettlementConflictError,
    SettlementValidationError,
)
from app.models.order import EDITABLE_SETTLEMENT_STATUSES, Order, SettlementStatus
from app.repositories.fulfillment_request_repository import FulfillmentRequestRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.wallet_transaction_repository import WalletTransactionRepository
from app.schemas.order import OrderCostsUpdate
from app.schemas.settlement import CostBreakdown
from app.services.audit_service import ACTION_ORDER_COSTS_UPDATED, ACTION_ORDER_SETTLED, AuditService
from app.services.fulfillment_service import FulfillmentService
from app.services.notification_service import NotificationService
from app.services.sinks import emit
from app.services.wallet_service import WalletService

logger = logging.getLogger(__name__)

COST_FIELDS = ("product_cost", "shipping_cost", "service_fee")


def settlement_reference(order_id: UUID) -> str:
    """Idempotency key of the one debit an order may ever produce."""
    return f"{settings.SETTLEMENT_REFERENCE_PREFIX}:{order_id}"


@dataclass
class SettlementResult:
    order_id: UUID
    fulfillment_request_id: UUID | None
    amount_charged: int
    new_balance: int
    wallet_transaction_id: UUID | None = None
    replayed: bool = False


class SettlementService:
    """Service for order cost configuration and wallet settlement."""

    def __init__(self, db: Session):
        self.db = db
        self.order_repo = OrderRepository(db)
        self.txn_repo = WalletTransactionRepository(db)
        self.fulfillment_repo = FulfillmentRequestRepository(db)
        self.wallet_service = WalletService(db)
        self.fulfillment_service = FulfillmentService(db)

    def get_order(self, order_id: UUID, merchant_id: UUID | None = None) -> Order:
        order = self.order_repo.get_by_id(order_id, merchant_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    @staticmethod
    def resolve_costs(order: Order) -> CostBreakdown:
        """Cost breakdown with defaults applied to fields that were never set.

        ``product_cost`` falls back to the order subtotal, the other two to 0.
        An explicit 0 is kept as 0.
        """
        product_cost = order.product_cost
        if product_cost is None:
            product_cost = order.subtotal_price or 0
        return CostBreakdown(
            product_cost=int(product_cost),  # type: ignore[arg-type]
            shipping_cost=int(order.shipping_cost or 0),  # type: ignore[arg-type]
            service_fee=int(order.service_fee or 0),  # type: ignore[arg-type]
        )

    def set_costs(
        self,
        order_id: UUID,
        costs: OrderCostsUpdate,
        merchant_id: UUID | None = None,
        actor_id: str | None = None,
    ) -> Order:
        """Overwrite the supplied cost fields of an unsettled order.

        Raises:
            OrderNotFoundError: unknown order.
            SettlementValidationError: a supplied cost is negative.
            CostsNotEditableError: the order is settled, including when it
                became settled while this call was running.
        """
        order = self.get_order(order_id, merchant_id)
        values = costs.model_dump(exclude_none=True)
        for field, value in values.items():
            if value < 0:
                raise SettlementValidationError(f"{field} cannot be negative")
        if SettlementStatus(order.settlement_status) not in EDITABLE_SETTLEMENT_STATUSES:
            raise CostsNotEditableError(order_id)

        previous = {field: getattr(order, field) for field in values}
        if not self.order_repo.update_costs(order.id, values):  # type: ignore[arg-type]
            raise CostsNotEditableError(order_id)
        self.db.refresh(order)

        emit(
            self.db,
            "Audit of order cost update",
            AuditService(self.db).log,
            action=ACTION_ORDER_COSTS_UPDATED,
            resource_type="order",
            resource_id=order.id,
            merchant_id=order.merchant_id,
            actor_id=actor_id,
            details={
                field: {"old": previous[field], "new": value} for field, value in values.items()
            },
        )
        return order

    def settle(
        self,
        order_id: UUID,
        merchant_id: UUID | None = None,
        actor_id: str | None = None,
    ) -> SettlementResult:
        """Charge the merchant's wallet for an order and hand it to fulfillment.

        Safe to call any number of times, concurrently or after a timeout:
        once the order has been charged every call returns the original
        outcome with ``replayed=True``.

        Raises:
            OrderNotFoundError: unknown order.
            SettlementValidationError: the resolved costs add up to zero.
            InsufficientFundsError: the wallet cannot cover the costs. The
                order is left in ``awaiting_funds`` with its shortfall and no
                money has moved.
            SettlementConflictError: the order changed underneath this call,
                e.g. its costs were edited after they were read, and there was
                nothing to replay. The debit is rolled back; retrying is safe.
        """
        order = self.get_order(order_id, merchant_id)
        stored_costs = {field: getattr(order, field) for field in COST_FIELDS}
        costs = self.resolve_costs(order)
        required = costs.total
        if required <= 0:
            raise SettlementValidationError("Order has no costs to settle")

        replay = self._replay(order.id)  # type: ignore[arg-type]
        if replay is not None:
            return replay

        order_id = order.id  # type: ignore[assignment]
        order_merchant_id: UUID = order.merchant_id  # type: ignore[assignment]
        try:
            txn = self.wallet_service.append_debit(
                order_merchant_id,
                required,
                reference_id=settlement_reference(order_id),
                reason=f"Order fulfillment: {order.order_name}",
                metadata={"order_name": order.order_name, **costs.model_dump()},
                order_id=order_id,
                commit=False,
            )
        except InsufficientFundsError as exc:
            if not self.order_repo.mark_awaiting_funds(order_id, exc.shortfall):
                self.db.rollback()
                return self._replay_or_conflict(order_id)
            self.db.commit()
            logger.info(
                "Order %s awaiting funds: required %d, balance %d, shortfall %d",
                order_id,
                exc.required,
                exc.balance,
                exc.shortfall,
            )
            raise
        except DuplicateReferenceError:
            return self._replay_or_conflict(order_id)

        settled_at = datetime.now(UTC)
        try:
            if not self.order_repo.mark_settled(
                order_id,
                required,
                settled_at,
                txn.id,  # type: ignore[arg-type]
                expected_costs=stored_costs,
            ):
                self.db.rollback()
                return self._replay_or_conflict(order_id)
            request = self.fulfillment_service.create_for_settlement(
                order, costs, txn, settled_at, actor_id=actor_id
            )
            self.txn_repo.link_fulfillment_request(txn, request.id)  # type: ignore[arg-type]
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return self._replay_or_conflict(order_id)
        except SQLAlchemyError:
            self.db.rollback()
            raise

        result = SettlementResult(
            order_id=order_id,
            fulfillment_request_id=request.id,  # type: ignore[arg-type]
            amount_charged=required,
            new_balance=txn.balance_after,  # type: ignore[arg-type]
            wallet_transaction_id=txn.id,  # type: ignore[arg-type]
        )
        logger.info(
            "Settled order %s: charged %d, balance %d, fulfillment request %s",
            order_id,
            required,
            result.new_balance,
            result.fulfillment_request_id,
        )

        emit(
            self.db,
            "Order settlement notification",
            NotificationService(self.db).notify_order_settled,
            merchant_id=order_merchant_id,
            order_name=order.order_name,
            amount=required,
            new_balance=result.new_balance,
            fulfillment_request_id=result.fulfillment_request_id,
        )
        emit(
            self.db,
            "Audit of order settlement",
            AuditService(self.db).log,
            action=ACTION_ORDER_SETTLED,
            resource_type="order",
            resource_id=order_id,
            merchant_id=order_merchant_id,
            actor_id=actor_id,
            details={
                **costs.model_dump(),
                "amount": required,
                "balance_before": txn.balance_before,
                "balance_after": txn.balance_after,
                "wallet_transaction_id": str(txn.id),
                "fulfillment_request_id": str(result.fulfillment_request_id),
            },
        )
        return result

    def _replay(self, order_id: UUID) -> SettlementResult | None:
        """Outcome of an earlier successful settlement of ``order_id``, if any."""
        request = self.fulfillment_repo.get_by_order_id(order_id)
        txn = self.txn_repo.get_by_reference_id(settlement_reference(order_id))

        if request is not None:
            if txn is not None:
                new_balance = int(txn.balance_after)  # type: ignore[arg-type]
            else:
                wallet = self.wallet_service.get_or_create_wallet(request.merchant_id)  # type: ignore[arg-type]
                new_balance = int(wallet.balance)  # type: ignore[arg-type]
            return SettlementResult(
                order_id=order_id,
                fulfillment_request_id=request.id,  # type: ignore[arg-type]
                amount_charged=int(request.wallet_deducted_amount),  # type: ignore[arg-type]
                new_balance=new_balance,
                wallet_transaction_id=txn.id if txn is not None else None,  # type: ignore[arg-type]
                replayed=True,
            )

        if txn is not None:
            logger.warning(
                "Settlement debit %s for order %s has no fulfillment request yet",
                txn.id,
                order_id,
            )
            return SettlementResult(
                order_id=order_id,
                fulfillment_request_id=None,
                amount_charged=int(txn.amount),  # type: ignore[arg-type]
                new_balance=int(txn.balance_after),  # type: ignore[arg-type]
                wallet_transaction_id=txn.id,  # type: ignore[arg-type]
                replayed=True,
            )
        return None

    def _replay_or_conflict(self, order_id: UUID) -> SettlementResult:
        replay = self._replay(order_id)
        if replay is None:
            logger.warning("Order %s changed during settlement with nothing to replay", order_id)
            raise SettlementConflictError(order_id)
        logger.info("Settlement of order %s lost a race; replaying", order_id)
        return replay

    def find_resumable_orders(self, merchant_id: UUID) -> list[Order]:
        """Orders awaiting funds that the current balance could pay for.

        Each order is compared to the balance on its own, so together they
        may still exceed it. Nothing is charged here.
        """
        balance = int(self.wallet_service.get_or_create_wallet(merchant_id).balance)  # type: ignore[arg-type]
        return [
            order
            for order in self.order_repo.get_awaiting_funds(merchant_id)
            if 0 < self.resolve_costs(order).total <= balance
        ]

    def report_resumable_orders(self, merchant_id: UUID) -> list[Order]:
        """Log and notify about orders a top-up has made payable."""
        orders = self.find_resumable_orders(merchant_id)
        if orders:
            logger.info(
                "Merchant %s can now resume %d order(s): %s",
                merchant_id,
                len(orders),
                ", ".join(str(o.id) for o in orders),
            )
            emit(
                self.db,
                "Resumable orders notification",
                NotificationService(self.db).notify_orders_resumable,
                merchant_id=merchant_id,
                order_count=len(orders),
            )
        return orders
