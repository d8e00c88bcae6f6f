"""Service for creating merchant-facing notifications."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.notification import Notification
from app.repositories.notification_repository import NotificationRepository

# Notification categories
CATEGORY_WALLET = "wallet"
CATEGORY_ORDER = "order"
CATEGORY_FULFILLMENT = "fulfillment"


def format_amount(amount: int, currency: str | None = None) -> str:
    """Render minor units for display, e.g. ``600000`` -> ``6000.00 INR``."""
    return f"{amount / 100:.2f} {(currency or settings.WALLET_CURRENCY).upper()}"


class NotificationService:
    """Service for creating in-app notifications from ledger and settlement events."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository(db)

    def notify(
        self,
        *,
        merchant_id: UUID,
        category: str,
        title: str,
        message: str,
        resource_type: str | None = None,
        resource_id: UUID | None = None,
        metadata: dict | None = None,
    ) -> Notification:
        """Create a notification."""
        return self.repo.create(
            merchant_id=merchant_id,
            category=category,
            title=title,
            message=message,
            resource_type=resource_type,
            resource_id=resource_id,
            metadata=metadata,
        )

    def notify_order_settled(
        self,
        *,
        merchant_id: UUID,
        order_name: str,
        amount: int,
        new_balance: int,
        fulfillment_request_id: UUID | None = None,
    ) -> Notification:
        """Tell the merchant their wallet paid for an order's fulfillment."""
        return self.notify(
            merchant_id=merchant_id,
            category=CATEGORY_ORDER,
            title="Order sent for fulfillment",
            message=(
                f"{format_amount(amount)} was deducted from your wallet for order "
                f"{order_name}. New balance: {format_amount(new_balance)}."
            ),
            resource_type="fulfillment_request",
            resource_id=fulfillment_request_id,
            metadata={"amount": amount, "new_balance": new_balance},
        )

    def notify_wallet_movement(
        self,
        *,
        merchant_id: UUID,
        amount: int,
        transaction_type: str,
        reason: str,
        transaction_id: UUID | None = None,
    ) -> Notification:
        """Create a notification for a top-up or manual adjustment."""
        is_credit = transaction_type == "credit"
        direction = "added to" if is_credit else "deducted from"
        return self.notify(
            merchant_id=merchant_id,
            category=CATEGORY_WALLET,
            title="Wallet credit" if is_credit else "Wallet debit",
            message=f"{format_amount(amount)} {direction} your wallet. Reason: {reason}",
            resource_type="wallet_transaction",
            resource_id=transaction_id,
            metadata={"amount": amount, "type": transaction_type},
        )

    def notify_orders_resumable(
        self,
        *,
        merchant_id: UUID,
        order_count: int,
    ) -> Notification:
        """Create a notification when a top-up covers orders waiting on funds."""
        return self.notify(
            merchant_id=merchant_id,
            category=CATEGORY_ORDER,
            title="Orders ready to fulfill",
            message=(
                f"Your wallet now covers {order_count} "
                f"order{'s' if order_count != 1 else ''} awaiting funds."
            ),
            metadata={"order_count": order_count},
        )

    def notify_fulfillment_status(
        self,
        *,
        merchant_id: UUID,
        order_name: str,
        status: str,
        fulfillment_request_id: UUID | None = None,
    ) -> Notification:
        """Create a notification when operations move a fulfillment request."""
        return self.notify(
            merchant_id=merchant_id,
            category=CATEGORY_FULFILLMENT,
            title="Order status updated",
            message=(
                f"Your order {order_name} status has been updated to: "
                f"{status.replace('_', ' ').upper()}"
            ),
            resource_type="fulfillment_request",
            resource_id=fulfillment_request_id,
            metadata={"status": status},
        )
