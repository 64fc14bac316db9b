"""
Cancel Order Use Case

Customer-initiated cancellation with compensating stock release.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from marketplace.domains.commerce.application.ports import INotificationDispatcher, IUnitOfWork
from marketplace.domains.commerce.application.use_cases.order_access import (
    ensure_customer_owns,
    load_order,
    short_order_ref,
)

logger = logging.getLogger(__name__)


@dataclass
class CancelOrderRequest:
    """Request for cancelling an order."""

    order_id: UUID
    user_id: str


@dataclass
class CancelOrderResponse:
    """Response from cancelling an order."""

    order: dict[str, Any] = field(default_factory=dict)
    success: bool = True
    message: str = "Order cancelled successfully"


class CancelOrderUseCase:
    """
    Use Case: Cancel Order

    Only the owning customer may cancel, and only while the order is
    AWAITING_PAYMENT or PENDING_CONFIRMATION. The status change and the
    stock release for every line commit together.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        notifier: INotificationDispatcher,
    ):
        self.uow_factory = uow_factory
        self.notifier = notifier

    async def execute(self, request: CancelOrderRequest) -> CancelOrderResponse:
        async with self.uow_factory() as uow:
            order = await load_order(uow, request.order_id, for_update=True)
            ensure_customer_owns(order, request.user_id, "cancel_order")

            order.cancel_by_customer()
            for item in order.items:
                await uow.stock.release(item.product_id, item.quantity)
            await uow.orders.save(order)

            shop = await uow.shops.get(order.shop_id) if order.shop_id else None

        logger.info(f"Order {order.id} cancelled by customer {request.user_id}; stock released")

        if shop:
            await self.notifier.notify(
                shop.owner_id,
                "Order cancelled",
                f"Order #{short_order_ref(order)} was cancelled by the customer.",
                {"order_id": str(order.id), "type": "order_cancelled"},
            )

        return CancelOrderResponse(order=order.to_detail_dict())


__all__ = ["CancelOrderRequest", "CancelOrderResponse", "CancelOrderUseCase"]
