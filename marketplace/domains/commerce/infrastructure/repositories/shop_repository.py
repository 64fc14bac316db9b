"""
SQLAlchemy Shop Repository
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.domains.commerce.domain.entities import Shop
from marketplace.domains.commerce.infrastructure.repositories.mapping import as_utc
from marketplace.models.db import ShopModel


class SQLAlchemyShopRepository:
    """SQLAlchemy implementation of IShopRepository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, shop_id: UUID) -> Shop | None:
        model = await self.session.get(ShopModel, shop_id)
        return self._to_entity(model) if model else None

    async def list_by_owner(self, owner_id: str) -> list[Shop]:
        result = await self.session.execute(
            select(ShopModel).where(ShopModel.owner_id == owner_id).order_by(ShopModel.created_at)
        )
        return [self._to_entity(model) for model in result.scalars().all()]

    @staticmethod
    def _to_entity(model: ShopModel) -> Shop:
        return Shop(
            id=model.id,
            owner_id=model.owner_id,
            name=model.name,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
