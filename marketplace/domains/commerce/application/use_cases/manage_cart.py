"""
Cart Use Cases

Read and edit the user's cart. Lines snapshot the product's name, shop,
image and current price at the moment they are added.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from marketplace.core.domain import (
    EntityNotFoundException,
    InsufficientStockException,
    ValidationException,
)
from marketplace.domains.commerce.application.ports import IUnitOfWork
from marketplace.domains.commerce.domain.entities import CartItem

logger = logging.getLogger(__name__)


@dataclass
class AddToCartRequest:
    user_id: str
    product_id: UUID
    quantity: int = 1


@dataclass
class UpdateCartItemRequest:
    user_id: str
    product_id: UUID
    quantity: int


class GetCartUseCase:
    """Use Case: Get Cart"""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]):
        self.uow_factory = uow_factory

    async def execute(self, user_id: str) -> dict[str, Any]:
        async with self.uow_factory() as uow:
            cart = await uow.carts.get(user_id)
        return cart.to_dict()


class AddToCartUseCase:
    """
    Use Case: Add To Cart

    Merges with an existing line for the same product. The resulting line
    quantity may not exceed the product's current stock.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]):
        self.uow_factory = uow_factory

    async def execute(self, request: AddToCartRequest) -> dict[str, Any]:
        if request.quantity <= 0:
            raise ValidationException("Quantity must be at least 1", field="quantity")

        async with self.uow_factory() as uow:
            product = await uow.stock.get_product(request.product_id)
            if product is None or product.shop_id is None:
                raise EntityNotFoundException("Product", request.product_id, message="Product not found")

            cart = await uow.carts.get(request.user_id)
            existing = cart.find_item(request.product_id)
            wanted = request.quantity + (existing.quantity if existing else 0)
            if not product.has_stock(wanted):
                raise InsufficientStockException(product.id, wanted, product.stock, product_name=product.name)

            cart.add_item(
                CartItem(
                    product_id=request.product_id,
                    shop_id=product.shop_id,
                    name=product.name,
                    unit_price=product.price,
                    quantity=request.quantity,
                    image_url=product.image_url,
                )
            )
            await uow.carts.save(cart)

        logger.debug(f"User {request.user_id} added {request.quantity} x {request.product_id} to cart")
        return cart.to_dict()


class UpdateCartItemUseCase:
    """Use Case: Update Cart Item (quantity 0 removes the line)"""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]):
        self.uow_factory = uow_factory

    async def execute(self, request: UpdateCartItemRequest) -> dict[str, Any]:
        async with self.uow_factory() as uow:
            cart = await uow.carts.get(request.user_id)
            if cart.find_item(request.product_id) is None:
                raise EntityNotFoundException("CartItem", request.product_id, message="Item is not in your cart")

            if request.quantity > 0:
                product = await uow.stock.get_product(request.product_id)
                if product is None:
                    raise EntityNotFoundException("Product", request.product_id, message="Product not found")
                if not product.has_stock(request.quantity):
                    raise InsufficientStockException(
                        product.id, request.quantity, product.stock, product_name=product.name
                    )

            cart.set_quantity(request.product_id, request.quantity)
            await uow.carts.save(cart)
        return cart.to_dict()


class RemoveCartItemUseCase:
    """Use Case: Remove Cart Item"""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]):
        self.uow_factory = uow_factory

    async def execute(self, user_id: str, product_id: UUID) -> dict[str, Any]:
        async with self.uow_factory() as uow:
            cart = await uow.carts.get(user_id)
            if not cart.remove_item(product_id):
                raise EntityNotFoundException("CartItem", product_id, message="Item is not in your cart")
            await uow.carts.save(cart)
        return cart.to_dict()


class ClearCartUseCase:
    """Use Case: Clear Cart"""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]):
        self.uow_factory = uow_factory

    async def execute(self, user_id: str) -> dict[str, Any]:
        async with self.uow_factory() as uow:
            await uow.carts.clear(user_id)
            cart = await uow.carts.get(user_id)
        return cart.to_dict()


__all__ = [
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "GetCartUseCase",
    "AddToCartUseCase",
    "UpdateCartItemUseCase",
    "RemoveCartItemUseCase",
    "ClearCartUseCase",
]
