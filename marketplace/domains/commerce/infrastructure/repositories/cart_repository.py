"""
SQLAlchemy Cart Repository
"""

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from marketplace.core.domain import Money, utcnow
from marketplace.domains.commerce.domain.entities import Cart, CartItem
from marketplace.domains.commerce.infrastructure.repositories.mapping import as_utc
from marketplace.models.db import CartItemModel, CartModel


class SQLAlchemyCartRepository:
    """SQLAlchemy implementation of ICartRepository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load(self, user_id: str) -> CartModel | None:
        stmt = (
            select(CartModel)
            .options(selectinload(CartModel.items))
            .where(CartModel.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get(self, user_id: str) -> Cart:
        model = await self._load(user_id)
        if model is None:
            return Cart(id=user_id)
        return self._to_entity(model)

    async def save(self, cart: Cart) -> Cart:
        model = await self._load(cart.id)
        if model is None:
            model = CartModel(user_id=cart.id, created_at=cart.created_at)
            model.items = []
            self.session.add(model)

        # Sync lines in place so the (user_id, product_id) constraint never
        # sees a delete and re-insert of the same product in one flush
        wanted = {item.product_id: item for item in cart.items}
        for line in list(model.items):
            item = wanted.pop(line.product_id, None)
            if item is None:
                model.items.remove(line)
                continue
            line.name = item.name
            line.unit_price = item.unit_price.amount
            line.quantity = item.quantity
            line.image_url = item.image_url
            line.shop_id = item.shop_id
        for item in wanted.values():
            model.items.append(
                CartItemModel(
                    product_id=item.product_id,
                    shop_id=item.shop_id,
                    name=item.name,
                    unit_price=item.unit_price.amount,
                    quantity=item.quantity,
                    image_url=item.image_url,
                )
            )

        model.total_price = cart.total_price.amount
        model.updated_at = cart.updated_at
        await self.session.flush()
        return cart

    async def clear(self, user_id: str) -> None:
        await self.session.execute(
            delete(CartItemModel)
            .where(CartItemModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(
            update(CartModel)
            .where(CartModel.user_id == user_id)
            .values(total_price=0, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def _to_entity(model: CartModel) -> Cart:
        items = [
            CartItem(
                product_id=line.product_id,
                shop_id=line.shop_id,
                name=line.name,
                unit_price=Money(line.unit_price),
                quantity=line.quantity,
                image_url=line.image_url,
            )
            for line in model.items
        ]
        return Cart(
            id=model.user_id,
            items=items,
            total_price=Money(model.total_price),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
