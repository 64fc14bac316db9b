"""
Commerce Application Use Cases
"""

from marketplace.domains.commerce.application.use_cases.cancel_order import (
    CancelOrderRequest,
    CancelOrderResponse,
    CancelOrderUseCase,
)
from marketplace.domains.commerce.application.use_cases.confirm_store_payment import (
    ConfirmStorePaymentRequest,
    ConfirmStorePaymentResponse,
    ConfirmStorePaymentUseCase,
    ProofUpload,
)
from marketplace.domains.commerce.application.use_cases.create_order import (
    CreateOrderRequest,
    CreateOrderResponse,
    CreateOrderUseCase,
)
from marketplace.domains.commerce.application.use_cases.create_payment_transaction import (
    CreatePaymentTransactionUseCase,
    PaymentTransactionRequest,
    PaymentTransactionResponse,
    RetryPaymentTransactionUseCase,
)
from marketplace.domains.commerce.application.use_cases.get_order_statistics import (
    GetOrderStatisticsUseCase,
    OrderStatisticsResponse,
)
from marketplace.domains.commerce.application.use_cases.get_orders import (
    GetOrderDetailRequest,
    GetOrderDetailUseCase,
    GetShopOrdersRequest,
    GetShopOrdersUseCase,
    GetUserOrdersRequest,
    GetUserOrdersUseCase,
    OrderListResponse,
)
from marketplace.domains.commerce.application.use_cases.manage_cart import (
    AddToCartRequest,
    AddToCartUseCase,
    ClearCartUseCase,
    GetCartUseCase,
    RemoveCartItemUseCase,
    UpdateCartItemRequest,
    UpdateCartItemUseCase,
)
from marketplace.domains.commerce.application.use_cases.manage_notifications import (
    ListNotificationsUseCase,
    MarkNotificationReadUseCase,
)
from marketplace.domains.commerce.application.use_cases.reconcile_payment import (
    GatewayNotificationRequest,
    GatewayNotificationResult,
    HandleGatewayNotificationUseCase,
    PaymentStatusRequest,
    PaymentStatusResponse,
    ReconcilePaymentStatusUseCase,
)
from marketplace.domains.commerce.application.use_cases.update_order_status import (
    UpdateOrderStatusRequest,
    UpdateOrderStatusResponse,
    UpdateOrderStatusUseCase,
)

__all__ = [
    # Orders
    "CreateOrderRequest",
    "CreateOrderResponse",
    "CreateOrderUseCase",
    "CancelOrderRequest",
    "CancelOrderResponse",
    "CancelOrderUseCase",
    "UpdateOrderStatusRequest",
    "UpdateOrderStatusResponse",
    "UpdateOrderStatusUseCase",
    "ConfirmStorePaymentRequest",
    "ConfirmStorePaymentResponse",
    "ConfirmStorePaymentUseCase",
    "ProofUpload",
    "GetUserOrdersRequest",
    "GetShopOrdersRequest",
    "GetOrderDetailRequest",
    "OrderListResponse",
    "GetUserOrdersUseCase",
    "GetShopOrdersUseCase",
    "GetOrderDetailUseCase",
    "GetOrderStatisticsUseCase",
    "OrderStatisticsResponse",
    # Cart
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "GetCartUseCase",
    "AddToCartUseCase",
    "UpdateCartItemUseCase",
    "RemoveCartItemUseCase",
    "ClearCartUseCase",
    # Payments
    "PaymentTransactionRequest",
    "PaymentTransactionResponse",
    "CreatePaymentTransactionUseCase",
    "RetryPaymentTransactionUseCase",
    "PaymentStatusRequest",
    "PaymentStatusResponse",
    "ReconcilePaymentStatusUseCase",
    "GatewayNotificationRequest",
    "GatewayNotificationResult",
    "HandleGatewayNotificationUseCase",
    # Notifications
    "ListNotificationsUseCase",
    "MarkNotificationReadUseCase",
]
