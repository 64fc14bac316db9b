"""
Database models
"""

from .base import CURRENT_SCHEMA_VERSION, Base, TimestampMixin
from .carts import CartItemModel, CartModel
from .catalog import ProductModel, ShopModel
from .notifications import NotificationModel
from .orders import OrderItemModel, OrderModel

__all__ = [
    "Base",
    "TimestampMixin",
    "CURRENT_SCHEMA_VERSION",
    "ShopModel",
    "ProductModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "NotificationModel",
]
