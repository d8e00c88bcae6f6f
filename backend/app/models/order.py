"""Order model: storefront source data plus wallet settlement state."""

from enum import Enum

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, ForeignKey, Index, String, func

from app.core.database import Base
from app.models.shared import MinorUnits, UUIDType, generate_uuid


class SettlementStatus(str, Enum):
    UNSETTLED = "unsettled"
    AWAITING_FUNDS = "awaiting_funds"
    SETTLED = "settled"


# settled is terminal: nothing leaves it.
SETTLEMENT_TRANSITIONS: dict[SettlementStatus, frozenset[SettlementStatus]] = {
    SettlementStatus.UNSETTLED: frozenset(
        {SettlementStatus.AWAITING_FUNDS, SettlementStatus.SETTLED}
    ),
    SettlementStatus.AWAITING_FUNDS: frozenset(
        {SettlementStatus.AWAITING_FUNDS, SettlementStatus.SETTLED}
    ),
    SettlementStatus.SETTLED: frozenset(),
}


def can_transition(current: SettlementStatus | str, target: SettlementStatus | str) -> bool:
    return SettlementStatus(target) in SETTLEMENT_TRANSITIONS[SettlementStatus(current)]


def statuses_reaching(target: SettlementStatus) -> frozenset[SettlementStatus]:
    """Statuses an order may be in for a move to ``target`` to be legal."""
    return frozenset(
        status for status, targets in SETTLEMENT_TRANSITIONS.items() if target in targets
    )


# Costs stay editable for as long as the order can still be settled.
EDITABLE_SETTLEMENT_STATUSES = statuses_reaching(SettlementStatus.SETTLED)


class Order(Base):
    """An order a merchant wants fulfilled from their wallet.

    The storefront columns (customer, address, line items, prices) are
    written once at ingestion and only read afterwards. Cost columns are
    ``NULL`` until explicitly set; see ``SettlementService.resolve_costs``
    for the defaults applied at settlement time.
    """

    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(
            "product_cost IS NULL OR product_cost >= 0", name="ck_orders_product_cost"
        ),
        CheckConstraint(
            "shipping_cost IS NULL OR shipping_cost >= 0", name="ck_orders_shipping_cost"
        ),
        CheckConstraint("service_fee IS NULL OR service_fee >= 0", name="ck_orders_service_fee"),
        Index("ix_orders_merchant_id_settlement_status", "merchant_id", "settlement_status"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    merchant_id = Column(UUIDType, nullable=False, index=True)

    # Storefront source data
    external_order_id = Column(String(255), nullable=True, index=True)
    order_name = Column(String(255), nullable=False)
    store_name = Column(String(255), nullable=False, default="")
    currency = Column(String(3), nullable=False, default="INR")
    customer = Column(JSON, nullable=False, default=dict)
    shipping_address = Column(JSON, nullable=True)
    line_items = Column(JSON, nullable=False, default=list)
    subtotal_price = Column(MinorUnits, nullable=False, default=0)
    total_price = Column(MinorUnits, nullable=False, default=0)

    # Settlement state
    product_cost = Column(MinorUnits, nullable=True)
    shipping_cost = Column(MinorUnits, nullable=True)
    service_fee = Column(MinorUnits, nullable=True)
    settlement_status = Column(
        String(20), nullable=False, default=SettlementStatus.UNSETTLED.value, index=True
    )
    charged_amount = Column(MinorUnits, nullable=True)
    charged_at = Column(DateTime(timezone=True), nullable=True)
    shortfall = Column(MinorUnits, nullable=False, default=0)
    wallet_transaction_id = Column(
        UUIDType,
        ForeignKey("wallet_transactions.id", ondelete="RESTRICT", use_alter=True),
        nullable=True,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
