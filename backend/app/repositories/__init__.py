from app.repositories.audit_log_repository import AuditLogRepository
from app.repositories.fulfillment_request_repository import FulfillmentRequestRepository
from app.repositories.notification_repository import NotificationRepository
from app.repositories.order_repository import OrderRepository
from app.repositories.wallet_repository import WalletRepository
from app.repositories.wallet_transaction_repository import WalletTransactionRepository

__all__ = [
    "AuditLogRepository",
    "FulfillmentRequestRepository",
    "NotificationRepository",
    "OrderRepository",
    "WalletRepository",
    "WalletTransactionRepository",
]
