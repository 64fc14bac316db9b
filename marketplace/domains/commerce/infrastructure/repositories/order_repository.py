"""
SQLAlchemy Order Repository

Async implementation of IOrderRepository. Writes use an optimistic
version check; ``get_for_update`` adds a row lock on databases that
support it.
"""

import logging
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from marketplace.core.domain import ConcurrencyException, Money
from marketplace.domains.commerce.domain.entities import Order, OrderItem, PaymentDetails
from marketplace.domains.commerce.domain.value_objects import OrderStatus, PaymentMethod, PaymentStatus
from marketplace.domains.commerce.infrastructure.repositories.mapping import as_utc
from marketplace.models.db import OrderItemModel, OrderModel

logger = logging.getLogger(__name__)


class SQLAlchemyOrderRepository:
    """
    SQLAlchemy implementation of IOrderRepository.

    Line items are written once, on insert; later saves only touch the
    order row.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _select(self):
        return select(OrderModel).options(selectinload(OrderModel.items))

    async def get(self, order_id: UUID) -> Order | None:
        result = await self.session.execute(self._select().where(OrderModel.id == order_id))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_for_update(self, order_id: UUID) -> Order | None:
        stmt = (
            self._select()
            .where(OrderModel.id == order_id)
            .with_for_update(of=OrderModel)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_by_gateway_order_id(self, gateway_order_id: str) -> Order | None:
        result = await self.session.execute(self._select().where(OrderModel.gateway_order_id == gateway_order_id))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def add(self, order: Order) -> Order:
        try:
            self.session.add(self._to_model(order))
            await self.session.flush()
            return order
        except Exception as e:
            logger.error(f"Error inserting order {order.id}: {e}")
            raise

    async def save(self, order: Order) -> Order:
        expected = order.version
        stmt = (
            update(OrderModel)
            .where(OrderModel.id == order.id, OrderModel.version == expected)
            .values(**self._mutable_values(order), version=expected + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            raise ConcurrencyException("Order", order.id, expected)
        order.increment_version()
        return order

    async def list_by_user(
        self, user_id: str, status: OrderStatus | None = None, limit: int = 20, offset: int = 0
    ) -> list[Order]:
        stmt = self._select().where(OrderModel.user_id == user_id)
        if status is not None:
            stmt = stmt.where(OrderModel.status == status.value)
        stmt = stmt.order_by(OrderModel.created_at.desc()).limit(limit).offset(offset)
        result = await self.session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def list_by_shops(
        self, shop_ids: list[UUID], status: OrderStatus | None = None, limit: int = 20, offset: int = 0
    ) -> list[Order]:
        stmt = self._select().where(OrderModel.shop_id.in_(shop_ids))
        if status is not None:
            stmt = stmt.where(OrderModel.status == status.value)
        stmt = stmt.order_by(OrderModel.created_at.desc()).limit(limit).offset(offset)
        result = await self.session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def count_by_status(self, shop_ids: list[UUID]) -> dict[OrderStatus, int]:
        stmt = (
            select(OrderModel.status, func.count(OrderModel.id))
            .where(OrderModel.shop_id.in_(shop_ids))
            .group_by(OrderModel.status)
        )
        result = await self.session.execute(stmt)
        return {OrderStatus(status): count for status, count in result.all()}

    async def sum_total(self, shop_ids: list[UUID], status: OrderStatus) -> Decimal:
        stmt = select(func.coalesce(func.sum(OrderModel.total_price), 0)).where(
            OrderModel.shop_id.in_(shop_ids), OrderModel.status == status.value
        )
        value = await self.session.scalar(stmt)
        return Decimal(str(value or 0)).quantize(Decimal("0.01"))

    # Mapping

    @staticmethod
    def _mutable_values(order: Order) -> dict[str, Any]:
        payment = order.payment
        return {
            "status": order.status.value,
            "payment_status": payment.status.value,
            "gateway_transaction_id": payment.gateway_transaction_id,
            "gateway_order_id": payment.gateway_order_id,
            "snap_token": payment.snap_token,
            "redirect_url": payment.redirect_url,
            "token_expires_at": payment.token_expires_at,
            "payment_type": payment.payment_type,
            "confirmation_notes": payment.confirmation_notes,
            "proof_image_urls": list(payment.proof_image_urls),
            "paid_at": payment.paid_at,
            "cancelled_at": order.cancelled_at,
            "completed_at": order.completed_at,
            "updated_at": order.updated_at,
        }

    def _to_model(self, order: Order) -> OrderModel:
        model = OrderModel(
            id=order.id,
            user_id=order.user_id,
            shop_id=order.shop_id,
            total_price=order.total_price.amount,
            notes=order.notes,
            payment_method=order.payment.method.value,
            version=order.version,
            created_at=order.created_at,
            **self._mutable_values(order),
        )
        model.items = [
            OrderItemModel(
                position=position,
                product_id=item.product_id,
                shop_id=item.shop_id,
                name=item.name,
                unit_price=item.unit_price.amount,
                quantity=item.quantity,
                subtotal=item.subtotal.amount,
                image_url=item.image_url,
            )
            for position, item in enumerate(order.items)
        ]
        return model

    @staticmethod
    def _to_entity(model: OrderModel) -> Order:
        payment = PaymentDetails(
            method=PaymentMethod(model.payment_method),
            status=PaymentStatus(model.payment_status),
            gateway_transaction_id=model.gateway_transaction_id,
            gateway_order_id=model.gateway_order_id,
            snap_token=model.snap_token,
            redirect_url=model.redirect_url,
            token_expires_at=as_utc(model.token_expires_at),
            payment_type=model.payment_type,
            confirmation_notes=model.confirmation_notes,
            proof_image_urls=list(model.proof_image_urls or []),
            paid_at=as_utc(model.paid_at),
        )
        items = [
            OrderItem(
                product_id=item.product_id,
                shop_id=item.shop_id,
                name=item.name,
                unit_price=Money(item.unit_price),
                quantity=item.quantity,
                image_url=item.image_url,
            )
            for item in model.items
        ]
        return Order(
            id=model.id,
            user_id=model.user_id,
            shop_id=model.shop_id,
            items=items,
            total_price=Money(model.total_price),
            status=OrderStatus(model.status),
            payment=payment,
            notes=model.notes,
            cancelled_at=as_utc(model.cancelled_at),
            completed_at=as_utc(model.completed_at),
            version=model.version,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
