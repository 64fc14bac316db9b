"""
Order Query Use Cases

Customer order history, order detail and the seller's shop order list.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from marketplace.core.domain import AuthorizationException
from marketplace.domains.commerce.application.ports import IUnitOfWork
from marketplace.domains.commerce.application.use_cases.order_access import load_order, seller_shop_ids
from marketplace.domains.commerce.domain.value_objects import OrderStatus

logger = logging.getLogger(__name__)


@dataclass
class GetUserOrdersRequest:
    """Request for a customer's order history."""

    user_id: str
    status: OrderStatus | None = None
    limit: int = 20
    offset: int = 0


@dataclass
class GetShopOrdersRequest:
    """Request for the orders of the seller's shop(s)."""

    seller_id: str
    status: OrderStatus | None = None
    limit: int = 20
    offset: int = 0


@dataclass
class OrderListResponse:
    """Page of order summaries."""

    orders: list[dict[str, Any]] = field(default_factory=list)
    count: int = 0
    limit: int = 20
    offset: int = 0


@dataclass
class GetOrderDetailRequest:
    """Request for one order, as customer or seller."""

    order_id: UUID
    user_id: str


class GetUserOrdersUseCase:
    """
    Use Case: Get User Orders

    Newest first, optionally filtered by status.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]):
        self.uow_factory = uow_factory

    async def execute(self, request: GetUserOrdersRequest) -> OrderListResponse:
        async with self.uow_factory() as uow:
            orders = await uow.orders.list_by_user(
                request.user_id, status=request.status, limit=request.limit, offset=request.offset
            )
        return OrderListResponse(
            orders=[order.to_summary_dict() for order in orders],
            count=len(orders),
            limit=request.limit,
            offset=request.offset,
        )


class GetShopOrdersUseCase:
    """
    Use Case: Get Shop Orders (seller)
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]):
        self.uow_factory = uow_factory

    async def execute(self, request: GetShopOrdersRequest) -> OrderListResponse:
        async with self.uow_factory() as uow:
            shop_ids = await seller_shop_ids(uow, request.seller_id)
            orders = await uow.orders.list_by_shops(
                shop_ids, status=request.status, limit=request.limit, offset=request.offset
            )
        return OrderListResponse(
            orders=[order.to_detail_dict() for order in orders],
            count=len(orders),
            limit=request.limit,
            offset=request.offset,
        )


class GetOrderDetailUseCase:
    """
    Use Case: Get Order Detail

    Visible to the customer who placed the order and to the owner of the
    shop that fulfills it.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]):
        self.uow_factory = uow_factory

    async def execute(self, request: GetOrderDetailRequest) -> dict[str, Any]:
        async with self.uow_factory() as uow:
            order = await load_order(uow, request.order_id)
            if not order.is_owned_by(request.user_id):
                shop = await uow.shops.get(order.shop_id) if order.shop_id else None
                if shop is None or not shop.is_owned_by(request.user_id):
                    raise AuthorizationException(
                        "view_order",
                        resource="order",
                        user_id=request.user_id,
                        message="You are not allowed to access this order",
                    )
        return order.to_detail_dict()


__all__ = [
    "GetUserOrdersRequest",
    "GetShopOrdersRequest",
    "GetOrderDetailRequest",
    "OrderListResponse",
    "GetUserOrdersUseCase",
    "GetShopOrdersUseCase",
    "GetOrderDetailUseCase",
]
