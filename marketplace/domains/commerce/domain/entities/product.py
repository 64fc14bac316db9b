"""
Product and Shop Entities for the Commerce Domain

Catalog data is owned elsewhere; orders only read it and move ``stock``
through the stock ledger.
"""

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from marketplace.core.domain import Entity, Money


@dataclass
class Shop(Entity[UUID]):
    """Seller storefront. ``owner_id`` is the seller's user id."""

    owner_id: str = ""
    name: str = ""

    def is_owned_by(self, user_id: str) -> bool:
        return self.owner_id == user_id


@dataclass
class Product(Entity[UUID]):
    """Catalog product with available stock."""

    shop_id: UUID | None = None
    name: str = ""
    price: Money = field(default_factory=Money.zero)
    stock: int = 0
    image_url: str | None = None

    def has_stock(self, quantity: int) -> bool:
        return self.stock >= quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "shop_id": str(self.shop_id) if self.shop_id else None,
            "name": self.name,
            "price": float(self.price.amount),
            "stock": self.stock,
            "image_url": self.image_url,
        }


__all__ = ["Product", "Shop"]
