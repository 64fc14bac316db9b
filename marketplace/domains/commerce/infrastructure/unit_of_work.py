"""
SQLAlchemy Unit of Work

One session and one transaction per ``async with`` block. Commits on a
clean exit, rolls back when the block raises.
"""

import logging
from typing import Self

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .repositories import (
    SQLAlchemyCartRepository,
    SQLAlchemyOrderRepository,
    SQLAlchemyShopRepository,
    SQLAlchemyStockLedger,
)

logger = logging.getLogger(__name__)


class SQLAlchemyUnitOfWork:
    """IUnitOfWork over an async session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> Self:
        self.session = self.session_factory()
        self.orders = SQLAlchemyOrderRepository(self.session)
        self.stock = SQLAlchemyStockLedger(self.session)
        self.carts = SQLAlchemyCartRepository(self.session)
        self.shops = SQLAlchemyShopRepository(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        session = self.session
        if session is None:
            return
        try:
            if exc_type is None:
                await session.commit()
            else:
                await session.rollback()
        except Exception as e:
            logger.error(f"Unit of work failed to finish: {e}")
            await session.rollback()
            raise
        finally:
            await session.close()
            self.session = None
