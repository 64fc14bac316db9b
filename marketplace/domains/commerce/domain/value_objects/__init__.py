"""
Commerce Domain Value Objects
"""

from marketplace.domains.commerce.domain.value_objects.order_status import (
    CUSTOMER_CANCELLABLE_STATUSES,
    GATEWAY_PAYABLE_STATUSES,
    SELLER_TRANSITIONS,
    TERMINAL_STATUSES,
    GatewayTransactionStatus,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)

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
