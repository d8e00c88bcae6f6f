from app.schemas.audit_log import AuditLogResponse
from app.schemas.fulfillment_request import (
    FulfillmentRequestResponse,
    FulfillmentStatus,
    FulfillmentStatusUpdate,
    StatusHistoryEntry,
)
from app.schemas.order import (
    CustomerInfo,
    LineItem,
    OrderCostsUpdate,
    OrderCreate,
    OrderResponse,
    SettlementStatus,
    ShippingAddress,
)
from app.schemas.notification import NotificationResponse
from app.schemas.settlement import CostBreakdown, InsufficientFundsResponse, SettlementResponse
from app.schemas.wallet import (
    WalletAdjustment,
    WalletResponse,
    WalletTopUp,
    WalletTopUpResponse,
)
from app.schemas.wallet_transaction import (
    TransactionType,
    WalletTransactionCreate,
    WalletTransactionResponse,
)

__all__ = [
    "AuditLogResponse",
    "CostBreakdown",
    "CustomerInfo",
    "FulfillmentRequestResponse",
    "FulfillmentStatus",
    "FulfillmentStatusUpdate",
    "InsufficientFundsResponse",
    "LineItem",
    "NotificationResponse",
    "OrderCostsUpdate",
    "OrderCreate",
    "OrderResponse",
    "SettlementResponse",
    "SettlementStatus",
    "ShippingAddress",
    "StatusHistoryEntry",
    "TransactionType",
    "WalletAdjustment",
    "WalletResponse",
    "WalletTopUp",
    "WalletTopUpResponse",
    "WalletTransactionCreate",
    "WalletTransactionResponse",
]
