"""
Shared pytest fixtures for all tests.

Provides in-memory implementations of the commerce ports (repositories,
stock ledger, unit of work), mock external collaborators (payment gateway,
notifier, proof storage) and sample shops, products and customers.
"""

import os
from collections import Counter
from collections.abc import Callable
from copy import deepcopy
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest

from marketplace.core.domain import (
    ConcurrencyException,
    InsufficientStockException,
    Money,
    ProductGoneException,
)
from marketplace.domains.commerce.application.ports import (
    CustomerProfile,
    GatewayStatusReport,
    GatewayTransaction,
)
from marketplace.domains.commerce.domain.entities import Cart, CartItem, Order, OrderItem, Product, Shop
from marketplace.domains.commerce.domain.value_objects import OrderStatus, PaymentMethod

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"

CUSTOMER_ID = "customer-1"
SELLER_ID = "seller-1"
OTHER_USER_ID = "intruder-1"


# ============================================================================
# IN-MEMORY PORTS
# ============================================================================


class InMemoryStore:
    """Shared state behind every FakeUnitOfWork of a test."""

    def __init__(self):
        self.orders: dict[UUID, Order] = {}
        self.products: dict[UUID, Product] = {}
        self.carts: dict[str, Cart] = {}
        self.shops: dict[UUID, Shop] = {}
        self.commits = 0
        self.rollbacks = 0


class FakeOrderRepository:
    """Stores deep copies so callers only see their changes after save."""

    def __init__(self, store: InMemoryStore, undo: list[Callable[[], None]]):
        self.store = store
        self.undo = undo

    async def get(self, order_id: UUID) -> Order | None:
        order = self.store.orders.get(order_id)
        return deepcopy(order) if order else None

    async def get_for_update(self, order_id: UUID) -> Order | None:
        return await self.get(order_id)

    async def find_by_gateway_order_id(self, gateway_order_id: str) -> Order | None:
        for order in self.store.orders.values():
            if order.payment.gateway_order_id == gateway_order_id:
                return deepcopy(order)
        return None

    async def add(self, order: Order) -> Order:
        self.store.orders[order.id] = deepcopy(order)
        self.undo.append(lambda: self.store.orders.pop(order.id, None))
        return order

    async def save(self, order: Order) -> Order:
        previous = self.store.orders.get(order.id)
        if previous is None or previous.version != order.version:
            raise ConcurrencyException("Order", order.id, order.version)
        order.increment_version()
        self.store.orders[order.id] = deepcopy(order)
        self.undo.append(lambda: self.store.orders.__setitem__(order.id, previous))
        return order

    async def list_by_user(
        self, user_id: str, status: OrderStatus | None = None, limit: int = 20, offset: int = 0
    ) -> list[Order]:
        orders = [o for o in self.store.orders.values() if o.user_id == user_id]
        return self._page(orders, status, limit, offset)

    async def list_by_shops(
        self, shop_ids: list[UUID], status: OrderStatus | None = None, limit: int = 20, offset: int = 0
    ) -> list[Order]:
        orders = [o for o in self.store.orders.values() if o.shop_id in shop_ids]
        return self._page(orders, status, limit, offset)

    async def count_by_status(self, shop_ids: list[UUID]) -> dict[OrderStatus, int]:
        return dict(Counter(o.status for o in self.store.orders.values() if o.shop_id in shop_ids))

    async def sum_total(self, shop_ids: list[UUID], status: OrderStatus) -> Decimal:
        return sum(
            (o.total_price.amount for o in self.store.orders.values() if o.shop_id in shop_ids and o.status is status),
            Decimal("0.00"),
        )

    @staticmethod
    def _page(orders: list[Order], status: OrderStatus | None, limit: int, offset: int) -> list[Order]:
        if status is not None:
            orders = [o for o in orders if o.status is status]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return [deepcopy(o) for o in orders[offset : offset + limit]]


class FakeStockLedger:
    def __init__(self, store: InMemoryStore, undo: list[Callable[[], None]]):
        self.store = store
        self.undo = undo

    async def get_product(self, product_id: UUID) -> Product | None:
        product = self.store.products.get(product_id)
        return deepcopy(product) if product else None

    async def reserve(self, product_id: UUID, quantity: int, product_name: str | None = None) -> None:
        product = self.store.products.get(product_id)
        if product is None:
            raise ProductGoneException(product_id, product_name)
        if product.stock < quantity:
            raise InsufficientStockException(product_id, quantity, product.stock, product_name=product_name)
        product.stock -= quantity
        self.undo.append(lambda: self._adjust(product_id, quantity))

    async def release(self, product_id: UUID, quantity: int) -> None:
        if product_id not in self.store.products:
            return
        self._adjust(product_id, quantity)
        self.undo.append(lambda: self._adjust(product_id, -quantity))

    def _adjust(self, product_id: UUID, delta: int) -> None:
        self.store.products[product_id].stock += delta


class FakeCartRepository:
    def __init__(self, store: InMemoryStore, undo: list[Callable[[], None]]):
        self.store = store
        self.undo = undo

    async def get(self, user_id: str) -> Cart:
        cart = self.store.carts.get(user_id)
        return deepcopy(cart) if cart else Cart(id=user_id)

    async def save(self, cart: Cart) -> Cart:
        self._remember(cart.id)
        self.store.carts[cart.id] = deepcopy(cart)
        return cart

    async def clear(self, user_id: str) -> None:
        self._remember(user_id)
        self.store.carts.pop(user_id, None)

    def _remember(self, user_id: str) -> None:
        previous = self.store.carts.get(user_id)

        def restore():
            if previous is None:
                self.store.carts.pop(user_id, None)
            else:
                self.store.carts[user_id] = previous

        self.undo.append(restore)


class FakeShopRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def get(self, shop_id: UUID) -> Shop | None:
        return self.store.shops.get(shop_id)

    async def list_by_owner(self, owner_id: str) -> list[Shop]:
        return [shop for shop in self.store.shops.values() if shop.owner_id == owner_id]


class FakeUnitOfWork:
    """
    Unit of work over an InMemoryStore.

    Writes go straight to the store and register an undo step; an exception
    inside the block replays the undo steps in reverse.
    """

    def __init__(self, store: InMemoryStore):
        self.store = store
        self._undo: list[Callable[[], None]] = []
        self.orders = FakeOrderRepository(store, self._undo)
        self.stock = FakeStockLedger(store, self._undo)
        self.carts = FakeCartRepository(store, self._undo)
        self.shops = FakeShopRepository(store)

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.store.commits += 1
        else:
            for action in reversed(self._undo):
                action()
            self.store.rollbacks += 1
        self._undo.clear()


# ============================================================================
# STORE AND UNIT OF WORK FIXTURES
# ============================================================================


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow_factory(store: InMemoryStore) -> Callable[[], FakeUnitOfWork]:
    return lambda: FakeUnitOfWork(store)


# ============================================================================
# SAMPLE DATA FIXTURES
# ============================================================================


@pytest.fixture
def shop(store: InMemoryStore) -> Shop:
    """A shop owned by SELLER_ID."""
    shop = Shop(id=uuid4(), owner_id=SELLER_ID, name="Toko Sumber Rejeki")
    store.shops[shop.id] = shop
    return shop


@pytest.fixture
def other_shop(store: InMemoryStore) -> Shop:
    shop = Shop(id=uuid4(), owner_id="seller-2", name="Warung Sebelah")
    store.shops[shop.id] = shop
    return shop


@pytest.fixture
def coffee(store: InMemoryStore, shop: Shop) -> Product:
    """Product with 5 units in stock at 10,000."""
    product = Product(id=uuid4(), shop_id=shop.id, name="Kopi Gayo 250g", price=Money(Decimal("10000")), stock=5)
    store.products[product.id] = product
    return product


@pytest.fixture
def tea(store: InMemoryStore, shop: Shop) -> Product:
    """Product with 10 units in stock at 5,000."""
    product = Product(id=uuid4(), shop_id=shop.id, name="Teh Melati", price=Money(Decimal("5000")), stock=10)
    store.products[product.id] = product
    return product


@pytest.fixture
def customer_id() -> str:
    return CUSTOMER_ID


@pytest.fixture
def seller_id() -> str:
    return SELLER_ID


@pytest.fixture
def intruder_id() -> str:
    return OTHER_USER_ID


@pytest.fixture
def customer() -> CustomerProfile:
    return CustomerProfile(uid=CUSTOMER_ID, name="Budi Santoso Wijaya", email="budi@example.com", phone="0812345")


def cart_line(product: Product, quantity: int) -> CartItem:
    return CartItem(
        product_id=product.id,
        shop_id=product.shop_id,
        name=product.name,
        unit_price=product.price,
        quantity=quantity,
        image_url=product.image_url,
    )


def order_line(product: Product, quantity: int) -> OrderItem:
    return OrderItem(
        product_id=product.id,
        shop_id=product.shop_id,
        name=product.name,
        unit_price=product.price,
        quantity=quantity,
    )


@pytest.fixture
def fill_cart(store: InMemoryStore) -> Callable[..., Cart]:
    """Put (product, quantity) lines into a user's cart."""

    def _fill(*lines: tuple[Product, int], user_id: str = CUSTOMER_ID) -> Cart:
        cart = Cart(id=user_id)
        for product, quantity in lines:
            cart.add_item(cart_line(product, quantity))
        store.carts[user_id] = cart
        return cart

    return _fill


@pytest.fixture
def seed_order(store: InMemoryStore) -> Callable[..., Order]:
    """Place an order directly in the store, bypassing checkout."""

    def _seed(
        *lines: tuple[Product, int],
        payment_method: PaymentMethod = PaymentMethod.PAY_AT_STORE,
        user_id: str = CUSTOMER_ID,
        status: OrderStatus | None = None,
        **payment_fields: Any,
    ) -> Order:
        order = Order.place(
            user_id=user_id,
            items=[order_line(product, quantity) for product, quantity in lines],
            payment_method=payment_method,
        )
        if status is not None:
            order.status = status
        for name, value in payment_fields.items():
            setattr(order.payment, name, value)
        store.orders[order.id] = deepcopy(order)
        return order

    return _seed


# ============================================================================
# EXTERNAL COLLABORATOR FIXTURES
# ============================================================================


@pytest.fixture
def mock_notifier():
    notifier = AsyncMock()
    notifier.notify = AsyncMock(return_value=None)
    return notifier


@pytest.fixture
def mock_gateway():
    """Payment gateway mock that accepts every signature."""
    gateway = MagicMock()
    gateway.client_key = "SB-Mid-client-test"
    gateway.create_transaction = AsyncMock(
        return_value=GatewayTransaction(token="snap-token-1", redirect_url="https://pay.example/snap/1")
    )
    gateway.get_status = AsyncMock(
        return_value=GatewayStatusReport(gateway_order_id="unused", transaction_status="pending")
    )
    gateway.verify_signature = MagicMock(return_value=True)
    return gateway


@pytest.fixture
def mock_storage():
    storage = AsyncMock()
    storage.store = AsyncMock(
        side_effect=lambda content, filename, order_id: f"http://files.test/static/payment-proofs/{filename}"
    )
    return storage
