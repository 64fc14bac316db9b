"""
Commerce API Schemas

Pydantic schemas for request validation. Status and payment-method values
are accepted case-insensitively and parsed into the domain enums.
"""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from marketplace.domains.commerce.domain.value_objects import OrderStatus, PaymentMethod


class AddCartItemRequest(BaseModel):
    """Add-to-cart request schema."""

    product_id: UUID
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemBody(BaseModel):
    """Cart line quantity update (0 removes the line)."""

    quantity: int = Field(..., ge=0)


class CreateOrderBody(BaseModel):
    """Checkout request schema."""

    payment_method: PaymentMethod
    notes: str | None = Field(default=None, max_length=1000)

    @field_validator("payment_method", mode="before")
    @classmethod
    def parse_payment_method(cls, value):
        if isinstance(value, str):
            return PaymentMethod.from_string(value)
        return value


class UpdateOrderStatusBody(BaseModel):
    """Seller status change request schema."""

    status: OrderStatus

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value):
        if isinstance(value, str):
            return OrderStatus.from_string(value)
        return value


def parse_status_filter(value: str | None) -> OrderStatus | None:
    """Optional ``?status=`` filter; raises ValueError on unknown values."""
    if value is None or not value.strip():
        return None
    return OrderStatus.from_string(value)
