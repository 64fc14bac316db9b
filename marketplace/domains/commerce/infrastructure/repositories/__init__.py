"""
Commerce Repositories

SQLAlchemy implementations of the commerce repository ports.
"""

from .cart_repository import SQLAlchemyCartRepository
from .notification_repository import SQLAlchemyNotificationRepository
from .order_repository import SQLAlchemyOrderRepository
from .product_repository import SQLAlchemyStockLedger
from .shop_repository import SQLAlchemyShopRepository

__all__ = [
    "SQLAlchemyOrderRepository",
    "SQLAlchemyStockLedger",
    "SQLAlchemyCartRepository",
    "SQLAlchemyShopRepository",
    "SQLAlchemyNotificationRepository",
]
