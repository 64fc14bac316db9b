"""
Cart Entity for the Commerce Domain

A user's pending selections, with the price captured when each line was
added. Checkout reads the lines and clears the cart in the same unit of
work that writes the order.
"""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from marketplace.core.domain import Entity, Money, ValidationException


@dataclass
class CartItem:
    """Cart line snapshot (price-at-add)."""

    product_id: UUID
    shop_id: UUID
    name: str
    unit_price: Money
    quantity: int
    image_url: str | None = None

    @property
    def subtotal(self) -> Money:
        return self.unit_price.multiply(self.quantity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": str(self.product_id),
            "shop_id": str(self.shop_id),
            "name": self.name,
            "unit_price": float(self.unit_price.amount),
            "quantity": self.quantity,
            "subtotal": float(self.subtotal.amount),
            "image_url": self.image_url,
        }


@dataclass
class Cart(Entity[str]):
    """
    Shopping cart, identified by its owner's user id.

    ``total_price`` is the cached total persisted alongside the lines; it is
    recomputed by every mutating method.
    """

    items: list[CartItem] = field(default_factory=list)
    total_price: Money = field(default_factory=Money.zero)

    @property
    def user_id(self) -> str | None:
        return self.id

    def is_empty(self) -> bool:
        return not self.items

    def find_item(self, product_id: UUID) -> CartItem | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def computed_total(self) -> Money:
        return Money.sum([item.subtotal for item in self.items])

    def add_item(self, item: CartItem) -> CartItem:
        """Add a line, merging quantities when the product is already in the cart."""
        if item.quantity <= 0:
            raise ValidationException("Quantity must be positive", field="quantity")
        existing = self.find_item(item.product_id)
        if existing:
            existing.quantity += item.quantity
            existing.unit_price = item.unit_price
            existing.name = item.name
            existing.image_url = item.image_url
            result = existing
        else:
            self.items.append(item)
            result = item
        self._refresh_total()
        return result

    def set_quantity(self, product_id: UUID, quantity: int) -> None:
        """Set a line's quantity; zero removes the line."""
        if quantity < 0:
            raise ValidationException("Quantity cannot be negative", field="quantity")
        item = self.find_item(product_id)
        if item is None:
            raise ValidationException("Product is not in the cart", field="product_id")
        if quantity == 0:
            self.items.remove(item)
        else:
            item.quantity = quantity
        self._refresh_total()

    def remove_item(self, product_id: UUID) -> bool:
        item = self.find_item(product_id)
        if item is None:
            return False
        self.items.remove(item)
        self._refresh_total()
        return True

    def clear(self) -> None:
        self.items.clear()
        self._refresh_total()

    def _refresh_total(self) -> None:
        self.total_price = self.computed_total()
        self.touch()

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.id,
            "items": [item.to_dict() for item in self.items],
            "total_price": float(self.total_price.amount),
            "items_count": len(self.items),
            "updated_at": self.updated_at.isoformat(),
        }


__all__ = ["Cart", "CartItem"]
