import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from marketplace.config.settings import Settings
from marketplace.models.db import Base

logger = logging.getLogger(__name__)


def create_async_database_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine (NullPool in development, pooled otherwise)"""
    database_url = settings.database_url

    base_config: dict = {
        "echo": settings.DB_ECHO,
        "pool_pre_ping": True,
    }

    if database_url.startswith("sqlite"):
        engine_config = base_config
    elif settings.is_development:
        logger.info("Creating async database engine for DEVELOPMENT (NullPool)")
        engine_config = {**base_config, "poolclass": NullPool}
    else:
        logger.info("Creating async database engine for PRODUCTION (pooled)")
        engine_config = {
            **base_config,
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_recycle": settings.DB_POOL_RECYCLE,
            "pool_timeout": settings.DB_POOL_TIMEOUT,
        }

    try:
        return create_async_engine(database_url, **engine_config)
    except Exception as e:
        logger.error(f"Failed to create async database engine: {e}")
        raise


class Database:
    """
    Engine and session factory handle.

    Built once by the application factory and passed to whatever needs a
    session; nothing in the service reaches for a module-level engine.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(create_async_database_engine(settings))

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Session context that commits on success and rolls back on error
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                logger.error(f"Async database error: {e}")
                await session.rollback()
                raise

    async def create_all(self) -> None:
        """Create tables directly (tests and local bootstrap; production uses alembic)"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
