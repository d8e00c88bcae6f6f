from app.models.audit_log import AuditLog
from app.models.fulfillment_request import FulfillmentRequest, FulfillmentStatus
from app.models.notification import Notification
from app.models.order import Order, SettlementStatus
from app.models.wallet import Wallet
from app.models.wallet_transaction import TransactionType, WalletTransaction

__all__ = [
    "AuditLog",
    "FulfillmentRequest",
    "FulfillmentStatus",
    "Notification",
    "Order",
    "SettlementStatus",
    "TransactionType",
    "Wallet",
    "WalletTransaction",
]
