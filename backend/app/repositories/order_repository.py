"""Order repository for data access.

Settlement-state writes are conditional UPDATEs keyed on the current
``settlement_status``, with the allowed source statuses taken from
``SETTLEMENT_TRANSITIONS``, so a concurrent settlement can never be
overwritten by a late cost edit or a late shortfall report.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.models.order import (
    EDITABLE_SETTLEMENT_STATUSES,
    Order,
    SettlementStatus,
    statuses_reaching,
)
from app.schemas.order import OrderCreate

_EDITABLE = [s.value for s in EDITABLE_SETTLEMENT_STATUSES]
_REACHES_AWAITING_FUNDS = [s.value for s in statuses_reaching(SettlementStatus.AWAITING_FUNDS)]
_REACHES_SETTLED = [s.value for s in statuses_reaching(SettlementStatus.SETTLED)]


class OrderRepository:
    """Repository for Order model."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, merchant_id: UUID, data: OrderCreate) -> Order:
        order = Order(
            merchant_id=merchant_id,
            external_order_id=data.external_order_id,
            order_name=data.order_name,
            store_name=data.store_name,
            currency=data.currency.upper(),
            customer=data.customer.model_dump(),
            shipping_address=(
                data.shipping_address.model_dump() if data.shipping_address else None
            ),
            line_items=[item.model_dump() for item in data.line_items],
            subtotal_price=data.subtotal_price,
            total_price=data.total_price,
            settlement_status=SettlementStatus.UNSETTLED.value,
        )
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def get_by_id(self, order_id: UUID, merchant_id: UUID | None = None) -> Order | None:
        query = self.db.query(Order).filter(Order.id == order_id)
        if merchant_id is not None:
            query = query.filter(Order.merchant_id == merchant_id)
        return query.first()

    def get_all(
        self,
        merchant_id: UUID,
        skip: int = 0,
        limit: int = 100,
        settlement_status: SettlementStatus | None = None,
    ) -> list[Order]:
        query = self.db.query(Order).filter(Order.merchant_id == merchant_id)
        if settlement_status is not None:
            query = query.filter(Order.settlement_status == settlement_status.value)
        return query.order_by(Order.created_at.desc()).offset(skip).limit(limit).all()

    def count(self, merchant_id: UUID, settlement_status: SettlementStatus | None = None) -> int:
        query = self.db.query(Order).filter(Order.merchant_id == merchant_id)
        if settlement_status is not None:
            query = query.filter(Order.settlement_status == settlement_status.value)
        return query.count()

    def get_awaiting_funds(self, merchant_id: UUID) -> list[Order]:
        """Orders waiting on a top-up, oldest first."""
        return (
            self.db.query(Order)
            .filter(
                Order.merchant_id == merchant_id,
                Order.settlement_status == SettlementStatus.AWAITING_FUNDS.value,
            )
            .order_by(Order.created_at.asc())
            .all()
        )

    def update_costs(self, order_id: UUID, values: dict[str, Any]) -> bool:
        """Overwrite the given cost columns while the order is still editable.

        Returns False when the order was already settled (or does not exist).
        """
        if not values:
            return (
                self.db.query(Order.id)
                .filter(Order.id == order_id, Order.settlement_status.in_(_EDITABLE))
                .first()
                is not None
            )
        result = self.db.execute(
            update(Order)
            .where(Order.id == order_id, Order.settlement_status.in_(_EDITABLE))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1  # type: ignore[attr-defined,no-any-return]

    def mark_awaiting_funds(self, order_id: UUID, shortfall: int) -> bool:
        """Record a shortfall unless the order has meanwhile been settled. Does not commit."""
        result = self.db.execute(
            update(Order)
            .where(Order.id == order_id, Order.settlement_status.in_(_REACHES_AWAITING_FUNDS))
            .values(
                settlement_status=SettlementStatus.AWAITING_FUNDS.value,
                shortfall=shortfall,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined,no-any-return]

    def mark_settled(
        self,
        order_id: UUID,
        charged_amount: int,
        charged_at: datetime,
        wallet_transaction_id: UUID,
        expected_costs: dict[str, int | None] | None = None,
    ) -> bool:
        """Move an order to settled. Does not commit.

        With ``expected_costs`` the update also requires each stored cost
        column to still hold the given value (``None`` matching ``NULL``), so
        costs edited after they were read make this return False.
        """
        conditions = [Order.id == order_id, Order.settlement_status.in_(_REACHES_SETTLED)]
        for field, value in (expected_costs or {}).items():
            column = getattr(Order, field)
            conditions.append(column.is_(None) if value is None else column == value)
        result = self.db.execute(
            update(Order)
            .where(*conditions)
            .values(
                settlement_status=SettlementStatus.SETTLED.value,
                charged_amount=charged_amount,
                charged_at=charged_at,
                shortfall=0,
                wallet_transaction_id=wallet_transaction_id,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined,no-any-return]
