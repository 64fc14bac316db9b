"""
Commerce API Dependencies

FastAPI dependencies for the commerce domain. Each provider asks the
container for a fresh use case.
"""

from fastapi import Depends

from marketplace.api.dependencies import get_container
from marketplace.core.container import CommerceContainer
from marketplace.domains.commerce.application.use_cases import (
    AddToCartUseCase,
    CancelOrderUseCase,
    ClearCartUseCase,
    ConfirmStorePaymentUseCase,
    CreateOrderUseCase,
    CreatePaymentTransactionUseCase,
    GetCartUseCase,
    GetOrderDetailUseCase,
    GetOrderStatisticsUseCase,
    GetShopOrdersUseCase,
    GetUserOrdersUseCase,
    ListNotificationsUseCase,
    MarkNotificationReadUseCase,
    ReconcilePaymentStatusUseCase,
    RemoveCartItemUseCase,
    RetryPaymentTransactionUseCase,
    UpdateCartItemUseCase,
    UpdateOrderStatusUseCase,
)


def get_get_cart_use_case(container: CommerceContainer = Depends(get_container)) -> GetCartUseCase:  # noqa: B008
    return container.create_get_cart_use_case()


def get_add_to_cart_use_case(container: CommerceContainer = Depends(get_container)) -> AddToCartUseCase:  # noqa: B008
    return container.create_add_to_cart_use_case()


def get_update_cart_item_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> UpdateCartItemUseCase:
    return container.create_update_cart_item_use_case()


def get_remove_cart_item_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> RemoveCartItemUseCase:
    return container.create_remove_cart_item_use_case()


def get_clear_cart_use_case(container: CommerceContainer = Depends(get_container)) -> ClearCartUseCase:  # noqa: B008
    return container.create_clear_cart_use_case()


def get_create_order_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> CreateOrderUseCase:
    """Get CreateOrderUseCase instance."""
    return container.create_create_order_use_case()


def get_cancel_order_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> CancelOrderUseCase:
    return container.create_cancel_order_use_case()


def get_user_orders_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> GetUserOrdersUseCase:
    return container.create_get_user_orders_use_case()


def get_order_detail_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> GetOrderDetailUseCase:
    return container.create_get_order_detail_use_case()


def get_shop_orders_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> GetShopOrdersUseCase:
    return container.create_get_shop_orders_use_case()


def get_order_statistics_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> GetOrderStatisticsUseCase:
    return container.create_get_order_statistics_use_case()


def get_update_order_status_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> UpdateOrderStatusUseCase:
    """Get UpdateOrderStatusUseCase instance."""
    return container.create_update_order_status_use_case()


def get_confirm_store_payment_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> ConfirmStorePaymentUseCase:
    return container.create_confirm_store_payment_use_case()


def get_create_payment_transaction_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> CreatePaymentTransactionUseCase:
    """Get CreatePaymentTransactionUseCase instance."""
    return container.create_create_payment_transaction_use_case()


def get_retry_payment_transaction_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> RetryPaymentTransactionUseCase:
    return container.create_retry_payment_transaction_use_case()


def get_reconcile_payment_status_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> ReconcilePaymentStatusUseCase:
    return container.create_reconcile_payment_status_use_case()


def get_list_notifications_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> ListNotificationsUseCase:
    return container.create_list_notifications_use_case()


def get_mark_notification_read_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> MarkNotificationReadUseCase:
    return container.create_mark_notification_read_use_case()
