"""
Order models
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, List

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, SchemaVersionMixin, TimestampMixin


class OrderModel(Base, TimestampMixin, SchemaVersionMixin):
    """Customer orders with embedded payment details"""

    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("shops.id"), nullable=False)

    status: Mapped[str] = mapped_column(String(32), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Payment
    payment_method: Mapped[str] = mapped_column(String(32), nullable=False)
    payment_status: Mapped[str] = mapped_column(String(32), nullable=False)
    gateway_transaction_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    gateway_order_id: Mapped[str | None] = mapped_column(String(128), nullable=True, unique=True)
    snap_token: Mapped[str | None] = mapped_column(String(255), nullable=True)
    redirect_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    payment_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    confirmation_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    proof_image_urls: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Optimistic concurrency token
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    items: Mapped[List["OrderItemModel"]] = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.position",
    )

    __table_args__ = (
        Index("idx_orders_user_created", "user_id", "created_at"),
        Index("idx_orders_shop_status", "shop_id", "status"),
    )

    def __repr__(self):
        return f"<Order(id='{self.id}', status='{self.status}', total={self.total_price})>"


class OrderItemModel(Base):
    """Order line items (immutable after checkout)"""

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    product_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    shop_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    order: Mapped[OrderModel] = relationship("OrderModel", back_populates="items")

    __table_args__ = (Index("idx_order_items_order", "order_id"),)
