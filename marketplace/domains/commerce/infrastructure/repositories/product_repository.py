"""
SQLAlchemy Stock Ledger

Stock moves through single conditional UPDATE statements so two
concurrent checkouts can never both take the last unit.
"""

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.domain import InsufficientStockException, Money, ProductGoneException
from marketplace.domains.commerce.domain.entities import Product
from marketplace.domains.commerce.infrastructure.repositories.mapping import as_utc
from marketplace.models.db import ProductModel

logger = logging.getLogger(__name__)


class SQLAlchemyStockLedger:
    """SQLAlchemy implementation of IStockLedger."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_product(self, product_id: UUID) -> Product | None:
        result = await self.session.execute(select(ProductModel).where(ProductModel.id == product_id))
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return Product(
            id=model.id,
            shop_id=model.shop_id,
            name=model.name,
            price=Money(model.price),
            stock=model.stock,
            image_url=model.image_url,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

    async def reserve(self, product_id: UUID, quantity: int, product_name: str | None = None) -> None:
        stmt = (
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(stock=ProductModel.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 1:
            return

        # Nothing matched: either the product is gone or stock ran short
        available = await self.session.scalar(select(ProductModel.stock).where(ProductModel.id == product_id))
        if available is None:
            raise ProductGoneException(product_id, product_name)
        raise InsufficientStockException(product_id, quantity, available, product_name)

    async def release(self, product_id: UUID, quantity: int) -> None:
        stmt = (
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock=ProductModel.stock + quantity)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            logger.warning(f"Could not return {quantity} unit(s) to product {product_id}: product no longer exists")
