"""
Commerce Application Ports

Interface definitions (ports) for the Commerce domain.
Uses Protocol for structural typing so tests can substitute in-memory fakes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol, Self, runtime_checkable
from uuid import UUID

from marketplace.domains.commerce.domain.entities import Cart, Order, Product, Shop
from marketplace.domains.commerce.domain.value_objects import OrderStatus


# Data carried across ports


@dataclass(frozen=True)
class CustomerProfile:
    """Authenticated principal as supplied by the identity provider."""

    uid: str
    name: str | None = None
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class GatewayTransaction:
    """Result of creating a payment transaction at the gateway."""

    token: str
    redirect_url: str


@dataclass(frozen=True)
class GatewayStatusReport:
    """Transaction status as reported by the gateway (poll or webhook)."""

    gateway_order_id: str
    transaction_status: str | None
    fraud_status: str | None = None
    payment_type: str | None = None
    transaction_id: str | None = None
    status_code: str | None = None
    gross_amount: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationRecord:
    """Stored in-app notification."""

    id: UUID
    user_id: str
    title: str
    body: str
    data: dict[str, Any]
    is_read: bool
    created_at: datetime


# Repositories


@runtime_checkable
class IOrderRepository(Protocol):
    """
    Interface for order repository.

    ``save`` persists with an optimistic version check and raises
    ConcurrencyException when the stored version moved.
    """

    async def get(self, order_id: UUID) -> Order | None:
        """Get order by ID"""
        ...

    async def get_for_update(self, order_id: UUID) -> Order | None:
        """Get order by ID, locking the row for the current unit of work"""
        ...

    async def find_by_gateway_order_id(self, gateway_order_id: str) -> Order | None:
        """Get order by the gateway-assigned id of its current payment attempt"""
        ...

    async def add(self, order: Order) -> Order:
        """Insert a new order"""
        ...

    async def save(self, order: Order) -> Order:
        """Persist changes to an existing order"""
        ...

    async def list_by_user(
        self, user_id: str, status: OrderStatus | None = None, limit: int = 20, offset: int = 0
    ) -> list[Order]:
        """List a customer's orders, newest first"""
        ...

    async def list_by_shops(
        self, shop_ids: list[UUID], status: OrderStatus | None = None, limit: int = 20, offset: int = 0
    ) -> list[Order]:
        """List orders placed with any of the given shops, newest first"""
        ...

    async def count_by_status(self, shop_ids: list[UUID]) -> dict[OrderStatus, int]:
        """Count orders per status for the given shops"""
        ...

    async def sum_total(self, shop_ids: list[UUID], status: OrderStatus) -> Decimal:
        """Sum order totals for the given shops and status"""
        ...


@runtime_checkable
class IStockLedger(Protocol):
    """
    Interface for product stock.

    ``reserve`` validates and decrements in one atomic step; ``release``
    increments without an upper bound.
    """

    async def get_product(self, product_id: UUID) -> Product | None:
        """Get product by ID"""
        ...

    async def reserve(self, product_id: UUID, quantity: int, product_name: str | None = None) -> None:
        """Atomically decrement stock; raises InsufficientStockException or ProductGoneException"""
        ...

    async def release(self, product_id: UUID, quantity: int) -> None:
        """Atomically increment stock"""
        ...


@runtime_checkable
class ICartRepository(Protocol):
    """Interface for cart repository."""

    async def get(self, user_id: str) -> Cart:
        """Get the user's cart (empty cart if none stored)"""
        ...

    async def save(self, cart: Cart) -> Cart:
        """Persist the cart lines and cached total"""
        ...

    async def clear(self, user_id: str) -> None:
        """Remove every line from the user's cart"""
        ...


@runtime_checkable
class IShopRepository(Protocol):
    """Interface for shop lookups."""

    async def get(self, shop_id: UUID) -> Shop | None:
        """Get shop by ID"""
        ...

    async def list_by_owner(self, owner_id: str) -> list[Shop]:
        """Get the shops a seller owns"""
        ...


@runtime_checkable
class INotificationRepository(Protocol):
    """Interface for the in-app notification inbox."""

    async def add(self, user_id: str, title: str, body: str, data: dict[str, Any]) -> NotificationRecord:
        """Store a notification"""
        ...

    async def list_by_user(self, user_id: str, limit: int = 50, offset: int = 0) -> list[NotificationRecord]:
        """List a user's notifications, newest first"""
        ...

    async def mark_read(self, user_id: str, notification_id: UUID) -> bool:
        """Mark one of the user's notifications as read"""
        ...


@runtime_checkable
class IUnitOfWork(Protocol):
    """
    One atomic unit over orders, stock, carts and shops.

    Leaving the ``async with`` block normally commits; an exception rolls
    everything back and propagates.
    """

    orders: IOrderRepository
    stock: IStockLedger
    carts: ICartRepository
    shops: IShopRepository

    async def __aenter__(self) -> Self: ...

    async def __aexit__(self, exc_type, exc, tb) -> None: ...


# External collaborators


@runtime_checkable
class IPaymentGateway(Protocol):
    """Interface for the external payment processor."""

    @property
    def client_key(self) -> str:
        """Public key for the frontend payment widget"""
        ...

    async def create_transaction(self, params: dict[str, Any]) -> GatewayTransaction:
        """Create a transaction; raises UpstreamGatewayException on failure"""
        ...

    async def get_status(self, gateway_order_id: str) -> GatewayStatusReport:
        """Query a transaction; raises EntityNotFoundException or UpstreamGatewayException"""
        ...

    def verify_signature(self, gateway_order_id: str, status_code: str, gross_amount: str, signature: str) -> bool:
        """Check a webhook signature"""
        ...


@runtime_checkable
class INotificationDispatcher(Protocol):
    """
    Fire-and-forget notifications.

    Delivery is at-most-once and best-effort: ``notify`` never raises, and
    callers invoke it only after their transaction committed.
    """

    async def notify(self, user_id: str, title: str, body: str, data: dict[str, Any] | None = None) -> None:
        """Send a notification, logging and swallowing any failure"""
        ...


@runtime_checkable
class IProofStorage(Protocol):
    """Interface for payment-proof image storage."""

    async def store(self, content: bytes, filename: str, order_id: str) -> str:
        """Store an upload and return its public URL"""
        ...

    async def delete(self, url: str) -> bool:
        """Remove a stored upload; False if it was not found"""
        ...


__all__ = [
    "CustomerProfile",
    "GatewayTransaction",
    "GatewayStatusReport",
    "NotificationRecord",
    "IOrderRepository",
    "IStockLedger",
    "ICartRepository",
    "IShopRepository",
    "INotificationRepository",
    "IUnitOfWork",
    "IPaymentGateway",
    "INotificationDispatcher",
    "IProofStorage",
]
