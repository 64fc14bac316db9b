"""
Create Order Use Case

Checkout: turn the user's cart into an order, reserve stock and clear the
cart in one unit of work.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from marketplace.core.domain import (
    DomainException,
    InsufficientStockException,
    ProductGoneException,
    ValidationException,
)
from marketplace.domains.commerce.application.ports import INotificationDispatcher, IUnitOfWork
from marketplace.domains.commerce.application.use_cases.order_access import short_order_ref
from marketplace.domains.commerce.domain.entities import Order, OrderItem
from marketplace.domains.commerce.domain.value_objects import PaymentMethod

logger = logging.getLogger(__name__)

# Allowed drift between the cart's cached total and the recomputed one
TOTAL_TOLERANCE = Decimal("0.001")


@dataclass
class CreateOrderRequest:
    """Request for creating an order from the user's cart."""

    user_id: str
    payment_method: PaymentMethod
    notes: str | None = None


@dataclass
class CreateOrderResponse:
    """Response from creating an order."""

    order: dict[str, Any] = field(default_factory=dict)
    success: bool = True
    message: str = "Order created successfully"


class CreateOrderUseCase:
    """
    Use Case: Create Order

    Responsibilities:
    - Read the cart and check every product still exists with enough stock
    - Recompute the total server-side (the recomputed value wins)
    - Write the order, reserve stock per line and clear the cart atomically
    - Notify the shop owner (best-effort, after commit)
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        notifier: INotificationDispatcher,
    ):
        """
        Initialize use case with dependencies.

        Args:
            uow_factory: Creates a unit of work per execution
            notifier: Best-effort notification dispatcher
        """
        self.uow_factory = uow_factory
        self.notifier = notifier

    async def execute(self, request: CreateOrderRequest) -> CreateOrderResponse:
        """
        Create an order.

        Raises:
            ValidationException: empty cart or items from several shops
            ProductGoneException: a cart line's product no longer exists
            InsufficientStockException: not enough stock for a cart line
        """
        if not request.user_id:
            raise ValidationException("User ID is required", field="user_id")

        try:
            async with self.uow_factory() as uow:
                cart = await uow.carts.get(request.user_id)
                if cart.is_empty():
                    raise ValidationException("Your cart is empty", field="cart")

                items: list[OrderItem] = []
                for line in cart.items:
                    product = await uow.stock.get_product(line.product_id)
                    if product is None:
                        raise ProductGoneException(line.product_id, line.name)
                    if not product.has_stock(line.quantity):
                        raise InsufficientStockException(
                            product.id, line.quantity, product.stock, product_name=product.name
                        )
                    items.append(
                        OrderItem(
                            product_id=line.product_id,
                            shop_id=product.shop_id or line.shop_id,
                            name=line.name,
                            unit_price=line.unit_price,
                            quantity=line.quantity,
                            image_url=line.image_url,
                        )
                    )

                order = Order.place(
                    user_id=request.user_id,
                    items=items,
                    payment_method=request.payment_method,
                    notes=request.notes,
                )

                drift = abs(order.total_price.amount - cart.total_price.amount)
                if drift > TOTAL_TOLERANCE:
                    logger.warning(
                        f"Cart total mismatch for user {request.user_id}: cached={cart.total_price.amount} "
                        f"recomputed={order.total_price.amount}; using recomputed total"
                    )

                # Conditional decrement: the check and the write are one statement
                for item in order.items:
                    await uow.stock.reserve(item.product_id, item.quantity, product_name=item.name)

                await uow.orders.add(order)
                await uow.carts.clear(request.user_id)

                shop = await uow.shops.get(order.shop_id) if order.shop_id else None
                shop_owner_id = shop.owner_id if shop else None

        except DomainException:
            raise
        except Exception as e:
            logger.error(f"Error creating order for user {request.user_id}: {e}", exc_info=True)
            raise

        logger.info(
            f"Order {order.id} created for user {request.user_id} "
            f"({order.payment.method.value}, total={order.total_price.amount})"
        )

        if shop_owner_id:
            await self.notifier.notify(
                shop_owner_id,
                "New order received",
                f"Order #{short_order_ref(order)} for {order.total_price} is waiting for you.",
                {"order_id": str(order.id), "type": "new_order"},
            )
        else:
            logger.warning(f"Order {order.id}: shop {order.shop_id} not found, owner not notified")

        return CreateOrderResponse(order=order.to_detail_dict())


__all__ = ["CreateOrderRequest", "CreateOrderResponse", "CreateOrderUseCase", "TOTAL_TOLERANCE"]
