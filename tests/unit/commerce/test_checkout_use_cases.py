"""
Unit tests for checkout and customer cancellation.

Runs the use cases against the in-memory unit of work from conftest so
stock, cart and order state can be asserted after commit or rollback.
"""

import asyncio
from uuid import uuid4

import pytest

from marketplace.core.domain import (
    AuthorizationException,
    EntityNotFoundException,
    InsufficientStockException,
    InvalidStateTransitionException,
    Money,
    ProductGoneException,
    ValidationException,
)
from marketplace.domains.commerce.application.use_cases import (
    CancelOrderRequest,
    CancelOrderUseCase,
    CreateOrderRequest,
    CreateOrderUseCase,
)
from marketplace.domains.commerce.domain.entities import CartItem, Product
from marketplace.domains.commerce.domain.value_objects import OrderStatus, PaymentMethod, PaymentStatus


@pytest.fixture
def create_order(uow_factory, mock_notifier):
    return CreateOrderUseCase(uow_factory=uow_factory, notifier=mock_notifier)


@pytest.fixture
def cancel_order(uow_factory, mock_notifier):
    return CancelOrderUseCase(uow_factory=uow_factory, notifier=mock_notifier)


@pytest.mark.unit
class TestCreateOrderUseCase:
    @pytest.mark.asyncio
    async def test_checkout_pay_at_store(
        self, create_order, store, fill_cart, coffee, shop, customer_id, mock_notifier
    ):
        """Two units of a product with stock 5 at 10,000 each."""
        # Arrange
        fill_cart((coffee, 2))

        # Act
        response = await create_order.execute(CreateOrderRequest(customer_id, PaymentMethod.PAY_AT_STORE))

        # Assert
        assert response.success is True
        assert response.order["status"] == "PENDING_CONFIRMATION"
        assert response.order["total_price"] == 20000.0
        assert store.products[coffee.id].stock == 3
        assert customer_id not in store.carts
        assert len(store.orders) == 1

        mock_notifier.notify.assert_awaited_once()
        owner_id, title = mock_notifier.notify.await_args.args[:2]
        assert owner_id == shop.owner_id
        assert title == "New order received"

    @pytest.mark.asyncio
    async def test_checkout_online_payment_awaits_payment(
        self, create_order, store, fill_cart, coffee, tea, customer_id
    ):
        fill_cart((coffee, 1), (tea, 3))

        response = await create_order.execute(CreateOrderRequest(customer_id, PaymentMethod.ONLINE_PAYMENT))

        order = next(iter(store.orders.values()))
        assert response.order["status"] == "AWAITING_PAYMENT"
        assert order.payment.status is PaymentStatus.PENDING
        assert order.total_price == Money(25000)
        assert store.products[tea.id].stock == 7

    @pytest.mark.asyncio
    async def test_recomputed_total_wins_over_cached_total(self, create_order, store, fill_cart, coffee, customer_id):
        # Arrange
        cart = fill_cart((coffee, 2))
        cart.total_price = Money(1)

        # Act
        response = await create_order.execute(CreateOrderRequest(customer_id, PaymentMethod.PAY_AT_STORE))

        # Assert
        assert response.order["total_price"] == 20000.0

    @pytest.mark.asyncio
    async def test_empty_cart_is_rejected(self, create_order, customer_id, mock_notifier):
        with pytest.raises(ValidationException, match="empty"):
            await create_order.execute(CreateOrderRequest(customer_id, PaymentMethod.PAY_AT_STORE))

        mock_notifier.notify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_user_is_rejected(self, create_order):
        with pytest.raises(ValidationException):
            await create_order.execute(CreateOrderRequest("", PaymentMethod.PAY_AT_STORE))

    @pytest.mark.asyncio
    async def test_insufficient_stock_leaves_everything_untouched(
        self, create_order, store, fill_cart, coffee, tea, customer_id, mock_notifier
    ):
        """Requesting 6 of a product with stock 5 fails before any write."""
        # Arrange
        fill_cart((tea, 2), (coffee, 6))

        # Act
        with pytest.raises(InsufficientStockException) as exc_info:
            await create_order.execute(CreateOrderRequest(customer_id, PaymentMethod.PAY_AT_STORE))

        # Assert
        assert exc_info.value.requested == 6
        assert exc_info.value.available == 5
        assert store.products[coffee.id].stock == 5
        assert store.products[tea.id].stock == 10
        assert len(store.carts[customer_id].items) == 2
        assert store.orders == {}
        mock_notifier.notify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deleted_product_is_reported_as_gone(self, create_order, store, fill_cart, coffee, customer_id):
        fill_cart((coffee, 1))
        del store.products[coffee.id]

        with pytest.raises(ProductGoneException) as exc_info:
            await create_order.execute(CreateOrderRequest(customer_id, PaymentMethod.PAY_AT_STORE))

        assert exc_info.value.code == "PRODUCT_GONE"
        assert store.orders == {}

    @pytest.mark.asyncio
    async def test_stock_race_at_reserve_rolls_back_earlier_reservations(
        self, create_order, store, fill_cart, coffee, tea, customer_id
    ):
        """Stock drops between the read check and the conditional decrement."""
        # Arrange
        fill_cart((tea, 4), (coffee, 2))

        def shrink_coffee_after_check(uow):
            read_product = uow.stock.get_product

            async def get_product(product_id):
                product = await read_product(product_id)
                if product_id == coffee.id:
                    store.products[coffee.id].stock = 1
                return product

            uow.stock.get_product = get_product
            return uow

        factory = create_order.uow_factory
        create_order.uow_factory = lambda: shrink_coffee_after_check(factory())

        # Act
        with pytest.raises(InsufficientStockException):
            await create_order.execute(CreateOrderRequest(customer_id, PaymentMethod.PAY_AT_STORE))

        # Assert
        assert store.products[tea.id].stock == 10
        assert store.products[coffee.id].stock == 1
        assert store.orders == {}
        assert len(store.carts[customer_id].items) == 2
        assert store.rollbacks == 1

    @pytest.mark.asyncio
    async def test_mixed_shop_cart_is_rejected(
        self, create_order, store, fill_cart, coffee, other_shop, customer_id
    ):
        # Arrange
        cart = fill_cart((coffee, 1))
        foreign = Product(id=uuid4(), shop_id=other_shop.id, name="Sambal", price=Money(3000), stock=4)
        store.products[foreign.id] = foreign
        cart.items.append(
            CartItem(product_id=foreign.id, shop_id=other_shop.id, name="Sambal", unit_price=Money(3000), quantity=1)
        )

        # Act / Assert
        with pytest.raises(ValidationException, match="same shop"):
            await create_order.execute(CreateOrderRequest(customer_id, PaymentMethod.PAY_AT_STORE))
        assert store.products[coffee.id].stock == 5

    @pytest.mark.asyncio
    async def test_concurrent_checkouts_never_oversell(self, uow_factory, mock_notifier, store, fill_cart, coffee):
        """Two customers each want 3 of the 5 units; exactly one succeeds."""
        # Arrange
        fill_cart((coffee, 3), user_id="customer-a")
        fill_cart((coffee, 3), user_id="customer-b")
        use_case = CreateOrderUseCase(uow_factory=uow_factory, notifier=mock_notifier)

        # Act
        results = await asyncio.gather(
            use_case.execute(CreateOrderRequest("customer-a", PaymentMethod.PAY_AT_STORE)),
            use_case.execute(CreateOrderRequest("customer-b", PaymentMethod.PAY_AT_STORE)),
            return_exceptions=True,
        )

        # Assert
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], InsufficientStockException)
        assert store.products[coffee.id].stock == 2
        assert len(store.orders) == 1


@pytest.mark.unit
class TestCancelOrderUseCase:
    @pytest.mark.asyncio
    async def test_cancel_releases_stock(
        self, cancel_order, store, seed_order, coffee, tea, shop, customer_id, mock_notifier
    ):
        # Arrange
        order = seed_order((coffee, 2), (tea, 1))
        store.products[coffee.id].stock = 3
        store.products[tea.id].stock = 9

        # Act
        response = await cancel_order.execute(CancelOrderRequest(order.id, customer_id))

        # Assert
        stored = store.orders[order.id]
        assert response.order["status"] == "CANCELLED"
        assert stored.status is OrderStatus.CANCELLED
        assert stored.payment.status is PaymentStatus.CANCELLED_BY_USER
        assert stored.version == 1
        assert store.products[coffee.id].stock == 5
        assert store.products[tea.id].stock == 10
        mock_notifier.notify.assert_awaited_once()
        assert mock_notifier.notify.await_args.args[0] == shop.owner_id

    @pytest.mark.asyncio
    async def test_cancel_awaiting_payment_order(self, cancel_order, store, seed_order, coffee, customer_id):
        order = seed_order((coffee, 1), payment_method=PaymentMethod.ONLINE_PAYMENT)

        await cancel_order.execute(CancelOrderRequest(order.id, customer_id))

        assert store.orders[order.id].status is OrderStatus.CANCELLED
        assert store.products[coffee.id].stock == 6

    @pytest.mark.asyncio
    async def test_cancel_processing_order_is_rejected(self, cancel_order, store, seed_order, coffee, customer_id):
        order = seed_order((coffee, 2), status=OrderStatus.PROCESSING)

        with pytest.raises(InvalidStateTransitionException):
            await cancel_order.execute(CancelOrderRequest(order.id, customer_id))

        assert store.orders[order.id].status is OrderStatus.PROCESSING
        assert store.products[coffee.id].stock == 5

    @pytest.mark.asyncio
    async def test_only_the_owner_can_cancel(self, cancel_order, store, seed_order, coffee, intruder_id):
        order = seed_order((coffee, 1))

        with pytest.raises(AuthorizationException):
            await cancel_order.execute(CancelOrderRequest(order.id, intruder_id))

        assert store.orders[order.id].status is OrderStatus.PENDING_CONFIRMATION

    @pytest.mark.asyncio
    async def test_unknown_order(self, cancel_order, customer_id):
        with pytest.raises(EntityNotFoundException):
            await cancel_order.execute(CancelOrderRequest(uuid4(), customer_id))

    @pytest.mark.asyncio
    async def test_release_skips_deleted_products(self, cancel_order, store, seed_order, coffee, tea, customer_id):
        order = seed_order((coffee, 1), (tea, 2))
        del store.products[coffee.id]

        await cancel_order.execute(CancelOrderRequest(order.id, customer_id))

        assert store.orders[order.id].status is OrderStatus.CANCELLED
        assert store.products[tea.id].stock == 12
