"""
Commerce Domain Entities
"""

from marketplace.domains.commerce.domain.entities.cart import Cart, CartItem
from marketplace.domains.commerce.domain.entities.order import Order, OrderItem, PaymentDetails
from marketplace.domains.commerce.domain.entities.product import Product, Shop

__all__ = [
    "Order",
    "OrderItem",
    "PaymentDetails",
    "Cart",
    "CartItem",
    "Product",
    "Shop",
]
