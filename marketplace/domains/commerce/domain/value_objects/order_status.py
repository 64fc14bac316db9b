"""
Order Status Value Objects for the Commerce Domain

Closed enumerations for order lifecycle, payment method and payment status,
plus the transition tables that govern who may move an order where.
"""

from marketplace.core.domain import StatusEnum


class OrderStatus(StatusEnum):
    """
    Order lifecycle states.

    Initial state depends on the payment method:
    - PAY_AT_STORE -> PENDING_CONFIRMATION
    - ONLINE_PAYMENT -> AWAITING_PAYMENT

    COMPLETED and CANCELLED are terminal. PAYMENT_FAILED is not: a payment
    retry returns the order to AWAITING_PAYMENT.
    """

    AWAITING_PAYMENT = "AWAITING_PAYMENT"
    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    READY_FOR_PICKUP = "READY_FOR_PICKUP"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    PAYMENT_FAILED = "PAYMENT_FAILED"

    def is_terminal(self) -> bool:
        """Check if this is a terminal (final) state."""
        return self in TERMINAL_STATUSES

    def can_be_cancelled_by_customer(self) -> bool:
        return self in CUSTOMER_CANCELLABLE_STATUSES

    def accepts_gateway_payment(self) -> bool:
        """Orders in these states may start, retry or reconcile a gateway payment."""
        return self in GATEWAY_PAYABLE_STATUSES

    def seller_sources_for(self) -> frozenset["OrderStatus"]:
        """States a seller may move an order *from* to reach this status (empty if not seller-settable)."""
        return SELLER_TRANSITIONS.get(self, frozenset())


class PaymentMethod(StatusEnum):
    """How the customer settles the order."""

    PAY_AT_STORE = "PAY_AT_STORE"
    ONLINE_PAYMENT = "ONLINE_PAYMENT"

    def initial_order_status(self) -> OrderStatus:
        if self is PaymentMethod.PAY_AT_STORE:
            return OrderStatus.PENDING_CONFIRMATION
        return OrderStatus.AWAITING_PAYMENT


class PaymentStatus(StatusEnum):
    """
    Payment state of the current attempt.

    ``deny``, ``expire`` and ``cancel`` mirror the gateway's failure
    statuses verbatim. ``paid`` is one-way: no gateway flow may regress it.
    """

    PENDING = "pending"
    PENDING_GATEWAY_PAYMENT = "pending_gateway_payment"
    PAID = "paid"
    CANCELLED_BY_USER = "cancelled_by_user"
    DENY = "deny"
    EXPIRE = "expire"
    CANCEL = "cancel"

    def is_failure(self) -> bool:
        return self in (PaymentStatus.DENY, PaymentStatus.EXPIRE, PaymentStatus.CANCEL)


class GatewayTransactionStatus(StatusEnum):
    """``transaction_status`` values reported by the payment gateway."""

    PENDING = "pending"
    CAPTURE = "capture"
    SETTLEMENT = "settlement"
    DENY = "deny"
    CANCEL = "cancel"
    EXPIRE = "expire"
    REFUND = "refund"
    PARTIAL_REFUND = "partial_refund"
    AUTHORIZE = "authorize"
    FAILURE = "failure"


TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})

CUSTOMER_CANCELLABLE_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.AWAITING_PAYMENT, OrderStatus.PENDING_CONFIRMATION}
)

GATEWAY_PAYABLE_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.AWAITING_PAYMENT, OrderStatus.PAYMENT_FAILED}
)

# Seller-driven transitions: target -> allowed source states.
# Payment-method and payment-status guards are enforced by Order.change_status_by_seller.
SELLER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PENDING_CONFIRMATION}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.CONFIRMED, OrderStatus.AWAITING_PAYMENT}),
    OrderStatus.READY_FOR_PICKUP: frozenset({OrderStatus.PROCESSING}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.READY_FOR_PICKUP}),
}


__all__ = [
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "GatewayTransactionStatus",
    "TERMINAL_STATUSES",
    "CUSTOMER_CANCELLABLE_STATUSES",
    "GATEWAY_PAYABLE_STATUSES",
    "SELLER_TRANSITIONS",
]
