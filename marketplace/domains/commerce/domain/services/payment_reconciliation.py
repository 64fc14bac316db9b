"""
Payment Reconciliation

Maps a gateway ``{transaction_status, fraud_status}`` pair onto the
internal order/payment state, and holds the user-facing status messages.
Pure functions only; the same mapping serves polling and webhooks.
"""

from dataclasses import dataclass

from marketplace.domains.commerce.domain.value_objects import (
    GatewayTransactionStatus,
    OrderStatus,
    PaymentStatus,
)

FRAUD_ACCEPT = "accept"


@dataclass(frozen=True)
class GatewayOutcome:
    """Internal state a gateway report asks the order to be in."""

    order_status: OrderStatus
    payment_status: PaymentStatus

    @property
    def is_success(self) -> bool:
        return self.payment_status is PaymentStatus.PAID


def map_gateway_status(transaction_status: str | None, fraud_status: str | None = None) -> GatewayOutcome | None:
    """
    Translate a gateway report into the outcome it implies.

    Returns None when the report implies no change (unknown statuses,
    a capture still under fraud review, refunds).
    """
    if not transaction_status:
        return None
    try:
        status = GatewayTransactionStatus.from_string(transaction_status)
    except ValueError:
        return None

    if status is GatewayTransactionStatus.CAPTURE:
        if (fraud_status or "").lower() == FRAUD_ACCEPT:
            return GatewayOutcome(OrderStatus.PROCESSING, PaymentStatus.PAID)
        return None

    if status is GatewayTransactionStatus.SETTLEMENT:
        return GatewayOutcome(OrderStatus.PROCESSING, PaymentStatus.PAID)

    if status is GatewayTransactionStatus.PENDING:
        return GatewayOutcome(OrderStatus.AWAITING_PAYMENT, PaymentStatus.PENDING_GATEWAY_PAYMENT)

    if status in (GatewayTransactionStatus.DENY, GatewayTransactionStatus.EXPIRE, GatewayTransactionStatus.CANCEL):
        return GatewayOutcome(OrderStatus.PAYMENT_FAILED, PaymentStatus(status.value))

    return None


_STATUS_MESSAGES: dict[str, str] = {
    "pending": "Your payment is awaiting completion. Please complete the payment if you have not yet.",
    "expire": "The payment time has expired. You can retry the payment if you still want this order.",
    "cancel": "The payment was cancelled. You can retry the payment if needed.",
    "deny": "The payment was denied by the payment provider.",
    "settlement": "Payment successful and received.",
    "capture": "Payment successful and received.",
}

ORDER_UPDATED_SUFFIX = " Your order status has also been updated."


def status_message(transaction_status: str | None, order_updated: bool = False) -> str:
    """User-facing message for a gateway transaction status."""
    key = (transaction_status or "").lower()
    message = _STATUS_MESSAGES.get(key, f"Transaction status: {transaction_status}.")
    if order_updated:
        message += ORDER_UPDATED_SUFFIX
    return message


__all__ = [
    "GatewayOutcome",
    "map_gateway_status",
    "status_message",
    "ORDER_UPDATED_SUFFIX",
]
