"""
Order access guards shared by the order and payment use cases.
"""

from uuid import UUID

from marketplace.core.domain import AuthorizationException, EntityNotFoundException
from marketplace.domains.commerce.application.ports import IUnitOfWork
from marketplace.domains.commerce.domain.entities import Order, Shop


async def load_order(uow: IUnitOfWork, order_id: UUID, for_update: bool = False) -> Order:
    """Load an order or raise EntityNotFoundException."""
    if for_update:
        order = await uow.orders.get_for_update(order_id)
    else:
        order = await uow.orders.get(order_id)
    if order is None:
        raise EntityNotFoundException("Order", order_id, message="Order not found")
    return order


def ensure_customer_owns(order: Order, user_id: str, operation: str) -> None:
    if not order.is_owned_by(user_id):
        raise AuthorizationException(
            operation,
            resource="order",
            user_id=user_id,
            message="You are not allowed to access this order",
        )


async def ensure_seller_owns(uow: IUnitOfWork, order: Order, seller_id: str, operation: str) -> Shop:
    """
    Check the seller owns the single shop every line item came from.

    Raises:
        AuthorizationException: mixed shops, unknown shop, or a shop owned
            by someone else
    """
    shop_ids = {item.shop_id for item in order.items}
    if order.shop_id is not None:
        shop_ids.add(order.shop_id)
    denied = AuthorizationException(
        operation,
        resource="order",
        user_id=seller_id,
        message="This order does not belong to your shop",
    )
    if len(shop_ids) != 1:
        raise denied
    shop = await uow.shops.get(next(iter(shop_ids)))
    if shop is None or not shop.is_owned_by(seller_id):
        raise denied
    return shop


async def seller_shop_ids(uow: IUnitOfWork, seller_id: str) -> list[UUID]:
    """IDs of the shops a seller owns; raises if the user owns none."""
    shops = await uow.shops.list_by_owner(seller_id)
    if not shops:
        raise AuthorizationException(
            "view_shop_orders",
            resource="shop",
            user_id=seller_id,
            message="You do not own a shop",
        )
    return [shop.id for shop in shops if shop.id is not None]


def short_order_ref(order: Order) -> str:
    """Compact reference used in notification texts."""
    return str(order.id).split("-")[0].upper()


__all__ = [
    "load_order",
    "ensure_customer_owns",
    "ensure_seller_owns",
    "seller_shop_ids",
    "short_order_ref",
]
