"""
Fixtures for integration tests.

Repositories run against a throwaway SQLite database (aiosqlite) created
from the ORM metadata; HTTP clients use httpx mock transports.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from marketplace.config.settings import Settings
from marketplace.database.async_db import Database
from marketplace.domains.commerce.infrastructure import SQLAlchemyUnitOfWork
from marketplace.models.db import ProductModel, ShopModel


@dataclass
class Catalog:
    shop_id: UUID
    owner_id: str
    coffee_id: UUID
    tea_id: UUID


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings isolated from the developer's .env."""
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'marketplace.db'}",
        JWT_SECRET_KEY="test-secret",
        MIDTRANS_SERVER_KEY="SB-Mid-server-test",
        MIDTRANS_CLIENT_KEY="SB-Mid-client-test",
        PROOF_STORAGE_PATH=str(tmp_path / "proofs"),
        PUBLIC_URL_BASE="http://files.test",
    )


@pytest_asyncio.fixture
async def database(test_settings):
    """Fresh schema per test."""
    db = Database(create_async_engine(test_settings.database_url))
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def sql_uow_factory(database):
    return lambda: SQLAlchemyUnitOfWork(database.session_factory)


@pytest_asyncio.fixture
async def catalog(database) -> Catalog:
    """One shop with coffee (stock 5 at 10,000) and tea (stock 10 at 5,000)."""
    shop_id, coffee_id, tea_id = uuid4(), uuid4(), uuid4()
    async with database.session() as session:
        session.add(ShopModel(id=shop_id, owner_id="seller-1", name="Toko Sumber Rejeki"))
        session.add_all(
            [
                ProductModel(id=coffee_id, shop_id=shop_id, name="Kopi Gayo 250g", price=Decimal("10000"), stock=5),
                ProductModel(id=tea_id, shop_id=shop_id, name="Teh Melati", price=Decimal("5000"), stock=10),
            ]
        )
    return Catalog(shop_id=shop_id, owner_id="seller-1", coffee_id=coffee_id, tea_id=tea_id)
