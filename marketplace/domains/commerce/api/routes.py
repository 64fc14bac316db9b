"""
Commerce API Routes

FastAPI routers for cart, orders, seller order management, payments and
the notification inbox. Every route requires a bearer token except the
gateway client-key lookup.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from marketplace.api.dependencies import get_app_settings
from marketplace.api.responses import success_response
from marketplace.api.security import get_current_principal
from marketplace.config.settings import Settings
from marketplace.core.domain import ValidationException
from marketplace.domains.commerce.api.dependencies import (
    get_add_to_cart_use_case,
    get_cancel_order_use_case,
    get_clear_cart_use_case,
    get_confirm_store_payment_use_case,
    get_create_order_use_case,
    get_create_payment_transaction_use_case,
    get_get_cart_use_case,
    get_list_notifications_use_case,
    get_mark_notification_read_use_case,
    get_order_detail_use_case,
    get_order_statistics_use_case,
    get_reconcile_payment_status_use_case,
    get_remove_cart_item_use_case,
    get_retry_payment_transaction_use_case,
    get_shop_orders_use_case,
    get_update_cart_item_use_case,
    get_update_order_status_use_case,
    get_user_orders_use_case,
)
from marketplace.domains.commerce.api.schemas import (
    AddCartItemRequest,
    CreateOrderBody,
    UpdateCartItemBody,
    UpdateOrderStatusBody,
    parse_status_filter,
)
from marketplace.domains.commerce.application.ports import CustomerProfile
from marketplace.domains.commerce.application.use_cases import (
    AddToCartRequest,
    AddToCartUseCase,
    CancelOrderRequest,
    CancelOrderUseCase,
    ClearCartUseCase,
    ConfirmStorePaymentRequest,
    ConfirmStorePaymentUseCase,
    CreateOrderRequest,
    CreateOrderUseCase,
    CreatePaymentTransactionUseCase,
    GetCartUseCase,
    GetOrderDetailRequest,
    GetOrderDetailUseCase,
    GetOrderStatisticsUseCase,
    GetShopOrdersRequest,
    GetShopOrdersUseCase,
    GetUserOrdersRequest,
    GetUserOrdersUseCase,
    ListNotificationsUseCase,
    MarkNotificationReadUseCase,
    OrderListResponse,
    PaymentStatusRequest,
    PaymentTransactionRequest,
    ProofUpload,
    ReconcilePaymentStatusUseCase,
    RemoveCartItemUseCase,
    RetryPaymentTransactionUseCase,
    UpdateCartItemRequest,
    UpdateCartItemUseCase,
    UpdateOrderStatusRequest,
    UpdateOrderStatusUseCase,
)
from marketplace.domains.commerce.domain.value_objects import OrderStatus

cart_router = APIRouter(prefix="/cart", tags=["Cart"])
orders_router = APIRouter(prefix="/orders", tags=["Orders"])
seller_router = APIRouter(prefix="/seller/orders", tags=["Seller Orders"])
payments_router = APIRouter(prefix="/payments", tags=["Payments"])
notifications_router = APIRouter(prefix="/notifications", tags=["Notifications"])


def _status_filter(status: str | None) -> OrderStatus | None:
    try:
        return parse_status_filter(status)
    except ValueError as e:
        raise ValidationException(str(e), field="status") from e


def _order_list(result: OrderListResponse) -> dict:
    return {
        "orders": result.orders,
        "count": result.count,
        "limit": result.limit,
        "offset": result.offset,
    }


# ==================== CART ====================


@cart_router.get("")
async def get_cart(
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: GetCartUseCase = Depends(get_get_cart_use_case),
):
    """Get the current user's cart."""
    cart = await use_case.execute(principal.uid)
    return success_response(cart, "Cart retrieved successfully")


@cart_router.post("/items", status_code=201)
async def add_cart_item(
    body: AddCartItemRequest,
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: AddToCartUseCase = Depends(get_add_to_cart_use_case),
):
    """Add a product to the cart (quantities merge for an existing line)."""
    cart = await use_case.execute(
        AddToCartRequest(user_id=principal.uid, product_id=body.product_id, quantity=body.quantity)
    )
    return success_response(cart, "Product added to cart", status_code=201)


@cart_router.put("/items/{product_id}")
async def update_cart_item(
    product_id: UUID,
    body: UpdateCartItemBody,
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: UpdateCartItemUseCase = Depends(get_update_cart_item_use_case),
):
    """Set a cart line's quantity."""
    cart = await use_case.execute(
        UpdateCartItemRequest(user_id=principal.uid, product_id=product_id, quantity=body.quantity)
    )
    return success_response(cart, "Cart updated successfully")


@cart_router.delete("/items/{product_id}")
async def remove_cart_item(
    product_id: UUID,
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: RemoveCartItemUseCase = Depends(get_remove_cart_item_use_case),
):
    """Remove a line from the cart."""
    cart = await use_case.execute(principal.uid, product_id)
    return success_response(cart, "Item removed from cart")


@cart_router.delete("")
async def clear_cart(
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: ClearCartUseCase = Depends(get_clear_cart_use_case),
):
    """Remove every line from the cart."""
    cart = await use_case.execute(principal.uid)
    return success_response(cart, "Cart cleared successfully")


# ==================== ORDERS (customer) ====================


@orders_router.post("", status_code=201)
async def create_order(
    body: CreateOrderBody,
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case),
):
    """Check out the current cart."""
    result = await use_case.execute(
        CreateOrderRequest(user_id=principal.uid, payment_method=body.payment_method, notes=body.notes)
    )
    return success_response(result.order, result.message, status_code=201)


@orders_router.get("")
async def list_orders(
    status: str | None = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: GetUserOrdersUseCase = Depends(get_user_orders_use_case),
):
    """List the current user's orders, newest first."""
    result = await use_case.execute(
        GetUserOrdersRequest(user_id=principal.uid, status=_status_filter(status), limit=limit, offset=offset)
    )
    return success_response(_order_list(result), "Orders retrieved successfully")


@orders_router.get("/{order_id}")
async def get_order(
    order_id: UUID,
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: GetOrderDetailUseCase = Depends(get_order_detail_use_case),
):
    """Get an order (customer or owning seller)."""
    order = await use_case.execute(GetOrderDetailRequest(order_id=order_id, user_id=principal.uid))
    return success_response(order, "Order retrieved successfully")


@orders_router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: UUID,
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: CancelOrderUseCase = Depends(get_cancel_order_use_case),
):
    """Cancel an order and return its stock."""
    result = await use_case.execute(CancelOrderRequest(order_id=order_id, user_id=principal.uid))
    return success_response(result.order, result.message)


# ==================== ORDERS (seller) ====================


@seller_router.get("")
async def list_shop_orders(
    status: str | None = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: GetShopOrdersUseCase = Depends(get_shop_orders_use_case),
):
    """List orders placed with the seller's shops."""
    result = await use_case.execute(
        GetShopOrdersRequest(seller_id=principal.uid, status=_status_filter(status), limit=limit, offset=offset)
    )
    return success_response(_order_list(result), "Shop orders retrieved successfully")


@seller_router.get("/statistics")
async def shop_order_statistics(
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: GetOrderStatisticsUseCase = Depends(get_order_statistics_use_case),
):
    """Order counts per status and completed revenue."""
    stats = await use_case.execute(principal.uid)
    return success_response(
        {
            "total_orders": stats.total_orders,
            "status_counts": stats.status_counts,
            "total_revenue": float(stats.total_revenue),
        },
        "Order statistics retrieved successfully",
    )


@seller_router.patch("/{order_id}/status")
async def update_order_status(
    order_id: UUID,
    body: UpdateOrderStatusBody,
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: UpdateOrderStatusUseCase = Depends(get_update_order_status_use_case),
):
    """Move an order along the seller workflow."""
    result = await use_case.execute(
        UpdateOrderStatusRequest(order_id=order_id, seller_id=principal.uid, new_status=body.status)
    )
    return success_response(result.order, result.message)


@seller_router.post("/{order_id}/confirm-payment")
async def confirm_store_payment(
    order_id: UUID,
    notes: str | None = Form(default=None),
    proof_images: list[UploadFile] | None = File(default=None),
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: ConfirmStorePaymentUseCase = Depends(get_confirm_store_payment_use_case),
):
    """Record an in-store payment with optional proof images."""
    uploads = [
        ProofUpload(filename=upload.filename or "", content=await upload.read()) for upload in proof_images or []
    ]
    result = await use_case.execute(
        ConfirmStorePaymentRequest(order_id=order_id, seller_id=principal.uid, notes=notes, proof_files=uploads)
    )
    return success_response(
        {"order": result.order, "uploaded_urls": result.uploaded_urls},
        result.message,
    )


# ==================== PAYMENTS ====================


@payments_router.get("/client-key")
async def get_client_key(settings: Settings = Depends(get_app_settings)):
    """Public client key for the payment widget (no auth)."""
    return success_response(
        {"client_key": settings.MIDTRANS_CLIENT_KEY, "is_production": settings.MIDTRANS_IS_PRODUCTION},
        "Client key retrieved successfully",
    )


@payments_router.post("/{order_id}/charge")
async def create_payment_transaction(
    order_id: UUID,
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: CreatePaymentTransactionUseCase = Depends(get_create_payment_transaction_use_case),
):
    """Create (or reuse) the gateway transaction for an order."""
    result = await use_case.execute(PaymentTransactionRequest(order_id=order_id, customer=principal))
    return success_response(result.to_dict(), result.message)


@payments_router.post("/{order_id}/retry")
async def retry_payment_transaction(
    order_id: UUID,
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: RetryPaymentTransactionUseCase = Depends(get_retry_payment_transaction_use_case),
):
    """Start a new payment attempt after a failed or expired one."""
    result = await use_case.execute(PaymentTransactionRequest(order_id=order_id, customer=principal))
    return success_response(result.to_dict(), result.message)


@payments_router.get("/{order_id}/status")
async def get_payment_status(
    order_id: UUID,
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: ReconcilePaymentStatusUseCase = Depends(get_reconcile_payment_status_use_case),
):
    """Query the gateway and reconcile the order's payment state."""
    result = await use_case.execute(PaymentStatusRequest(order_id=order_id, user_id=principal.uid))
    return success_response(result.to_dict(), result.message)


# ==================== NOTIFICATIONS ====================


@notifications_router.get("")
async def list_notifications(
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: ListNotificationsUseCase = Depends(get_list_notifications_use_case),
):
    """List the current user's notifications, newest first."""
    notifications = await use_case.execute(principal.uid, limit=limit, offset=offset)
    return success_response(notifications, "Notifications retrieved successfully")


@notifications_router.post("/{notification_id}/read")
async def mark_notification_read(
    notification_id: UUID,
    principal: CustomerProfile = Depends(get_current_principal),
    use_case: MarkNotificationReadUseCase = Depends(get_mark_notification_read_use_case),
):
    """Mark a notification as read."""
    await use_case.execute(principal.uid, notification_id)
    return success_response({"id": str(notification_id), "is_read": True}, "Notification marked as read")


__all__ = ["cart_router", "orders_router", "seller_router", "payments_router", "notifications_router"]
