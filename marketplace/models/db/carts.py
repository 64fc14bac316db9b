"""
Cart models
"""

import uuid
from decimal import Decimal
from typing import List

from sqlalchemy import ForeignKey, Integer, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, SchemaVersionMixin, TimestampMixin


class CartModel(Base, TimestampMixin, SchemaVersionMixin):
    """One cart per user"""

    __tablename__ = "carts"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    total_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)

    items: Mapped[List["CartItemModel"]] = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemModel.id",
    )


class CartItemModel(Base):
    """Cart lines with price captured when added"""

    __tablename__ = "cart_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), ForeignKey("carts.user_id", ondelete="CASCADE"), nullable=False)
    product_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    cart: Mapped[CartModel] = relationship("CartModel", back_populates="items")

    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_cart_items_user_product"),)
