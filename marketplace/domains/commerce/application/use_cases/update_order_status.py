"""
Update Order Status Use Case

Seller-driven fulfillment transitions.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from marketplace.domains.commerce.application.ports import INotificationDispatcher, IUnitOfWork
from marketplace.domains.commerce.application.use_cases.order_access import (
    ensure_seller_owns,
    load_order,
    short_order_ref,
)
from marketplace.domains.commerce.domain.value_objects import OrderStatus

logger = logging.getLogger(__name__)

_CUSTOMER_MESSAGES: dict[OrderStatus, str] = {
    OrderStatus.CONFIRMED: "Your order #{ref} has been confirmed by the shop.",
    OrderStatus.PROCESSING: "Your order #{ref} is being prepared.",
    OrderStatus.READY_FOR_PICKUP: "Your order #{ref} is ready for pickup.",
    OrderStatus.COMPLETED: "Your order #{ref} is complete. Thank you for shopping!",
}


@dataclass
class UpdateOrderStatusRequest:
    """Request for a seller status change."""

    order_id: UUID
    seller_id: str
    new_status: OrderStatus


@dataclass
class UpdateOrderStatusResponse:
    """Response from a seller status change."""

    order: dict[str, Any] = field(default_factory=dict)
    previous_status: OrderStatus | None = None
    success: bool = True
    message: str = "Order status updated successfully"


class UpdateOrderStatusUseCase:
    """
    Use Case: Update Order Status (seller)

    The order row is re-read under lock before the transition is validated
    so two concurrent updates cannot both apply.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        notifier: INotificationDispatcher,
    ):
        self.uow_factory = uow_factory
        self.notifier = notifier

    async def execute(self, request: UpdateOrderStatusRequest) -> UpdateOrderStatusResponse:
        async with self.uow_factory() as uow:
            order = await load_order(uow, request.order_id, for_update=True)
            await ensure_seller_owns(uow, order, request.seller_id, "update_order_status")

            previous = order.change_status_by_seller(request.new_status)
            await uow.orders.save(order)

        logger.info(
            f"Order {order.id} status {previous.value} -> {order.status.value} by seller {request.seller_id}"
        )

        template = _CUSTOMER_MESSAGES.get(order.status)
        if template:
            await self.notifier.notify(
                order.user_id,
                "Order status updated",
                template.format(ref=short_order_ref(order)),
                {"order_id": str(order.id), "status": order.status.value, "type": "order_status"},
            )

        return UpdateOrderStatusResponse(
            order=order.to_detail_dict(),
            previous_status=previous,
            message=f"Order status updated to {order.status.value}",
        )


__all__ = ["UpdateOrderStatusRequest", "UpdateOrderStatusResponse", "UpdateOrderStatusUseCase"]
