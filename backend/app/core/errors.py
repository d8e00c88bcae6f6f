"""Domain errors raised by the wallet ledger and settlement services.

Every error subclasses ``ValueError`` so routers can translate them to HTTP
responses the same way they translate plain validation failures. None of them
represent infrastructure problems: database errors propagate untouched.
"""

from uuid import UUID


class SettlementValidationError(ValueError):
    """Input cannot be settled or recorded (bad amount, missing costs)."""


class InsufficientFundsError(ValueError):
    """The wallet balance did not cover the requested debit.

    Raised both when the balance was already too low and when a concurrent
    debit consumed it first; callers cannot (and need not) tell the two apart.
    """

    def __init__(self, required: int, balance: int):
        self.required = int(required)
        self.balance = int(balance)
        self.shortfall = max(self.required - self.balance, 0)
        super().__init__(
            f"Insufficient wallet balance: required {self.required}, "
            f"available {self.balance}, shortfall {self.shortfall}"
        )


class DuplicateReferenceError(ValueError):
    """A ledger transaction with the same reference id already exists."""

    def __init__(self, reference_id: str):
        self.reference_id = reference_id
        super().__init__(f"Ledger transaction with reference '{reference_id}' already exists")


class CostsNotEditableError(ValueError):
    """Order costs are frozen once the order has been settled."""

    def __init__(self, order_id: UUID):
        self.order_id = order_id
        super().__init__(f"Costs for order {order_id} can no longer be changed: order is settled")


class OrderNotFoundError(ValueError):
    def __init__(self, order_id: UUID):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class FulfillmentRequestNotFoundError(ValueError):
    def __init__(self, fulfillment_request_id: UUID):
        self.fulfillment_request_id = fulfillment_request_id
        super().__init__(f"Fulfillment request {fulfillment_request_id} not found")


class SettlementConflictError(ValueError):
    """The order changed state while a settlement was in flight; retrying is safe."""

    def __init__(self, order_id: UUID):
        self.order_id = order_id
        super().__init__(f"Order {order_id} changed during settlement; retry the request")


class InvalidStatusTransitionError(ValueError):
    """Operational fulfillment status change not permitted from the current state."""

    def __init__(self, current: str, requested: str, allowed: list[str]):
        self.current = current
        self.requested = requested
        self.allowed = allowed
        super().__init__(
            f"Invalid status transition from {current} to {requested}. "
            f"Valid transitions: {', '.join(allowed) or 'none (terminal state)'}"
        )
