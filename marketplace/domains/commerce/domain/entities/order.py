"""
Order Entity for the Commerce Domain

Aggregate root for customer orders. Every lifecycle change (checkout,
cancellation, seller fulfillment, payment confirmation and gateway
reconciliation) goes through a method on this class so the state machine
and its payment guards are enforced in one place.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from marketplace.core.domain import (
    AggregateRoot,
    InvalidStateTransitionException,
    Money,
    ValidationException,
    generate_uuid,
    utcnow,
)
from marketplace.domains.commerce.domain.services.payment_reconciliation import GatewayOutcome
from marketplace.domains.commerce.domain.value_objects import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)


@dataclass
class OrderItem:
    """
    Line item of an order.

    Snapshot of the cart line at checkout; immutable afterwards.
    """

    product_id: UUID
    shop_id: UUID
    name: str
    unit_price: Money
    quantity: int
    image_url: str | None = None

    def __post_init__(self):
        if self.quantity <= 0:
            raise ValidationException("Quantity must be positive", field="quantity")

    @property
    def subtotal(self) -> Money:
        return self.unit_price.multiply(self.quantity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": str(self.product_id),
            "shop_id": str(self.shop_id),
            "name": self.name,
            "unit_price": float(self.unit_price.amount),
            "quantity": self.quantity,
            "subtotal": float(self.subtotal.amount),
            "image_url": self.image_url,
        }


@dataclass
class PaymentDetails:
    """Payment state of an order, including the current gateway attempt."""

    method: PaymentMethod
    status: PaymentStatus = PaymentStatus.PENDING
    gateway_transaction_id: str | None = None
    gateway_order_id: str | None = None
    snap_token: str | None = None
    redirect_url: str | None = None
    token_expires_at: datetime | None = None
    payment_type: str | None = None
    confirmation_notes: str | None = None
    proof_image_urls: list[str] = field(default_factory=list)
    paid_at: datetime | None = None

    @property
    def is_paid(self) -> bool:
        return self.status is PaymentStatus.PAID

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method.value,
            "status": self.status.value,
            "gateway_transaction_id": self.gateway_transaction_id,
            "gateway_order_id": self.gateway_order_id,
            "snap_token": self.snap_token,
            "redirect_url": self.redirect_url,
            "token_expires_at": self.token_expires_at.isoformat() if self.token_expires_at else None,
            "payment_type": self.payment_type,
            "confirmation_notes": self.confirmation_notes,
            "proof_image_urls": list(self.proof_image_urls),
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
        }


@dataclass
class Order(AggregateRoot[UUID]):
    """
    Order aggregate root.

    Invariants:
    - total_price equals the sum of item subtotals
    - every item belongs to the same shop (shop_id)
    - user_id, items and created_at never change after creation
    - COMPLETED and CANCELLED are terminal
    - a paid payment is never regressed by a gateway report
    """

    user_id: str = ""
    shop_id: UUID | None = None
    items: list[OrderItem] = field(default_factory=list)
    total_price: Money = field(default_factory=Money.zero)
    status: OrderStatus = OrderStatus.PENDING_CONFIRMATION
    payment: PaymentDetails = field(default_factory=lambda: PaymentDetails(method=PaymentMethod.PAY_AT_STORE))
    notes: str | None = None
    cancelled_at: datetime | None = None
    completed_at: datetime | None = None

    # Factory

    @classmethod
    def place(
        cls,
        user_id: str,
        items: list[OrderItem],
        payment_method: PaymentMethod,
        notes: str | None = None,
    ) -> "Order":
        """
        Create a new order from checked-out lines.

        The total is always recomputed from the items.

        Raises:
            ValidationException: no items, or items from more than one shop
        """
        if not items:
            raise ValidationException("Cannot create an order without items", field="items")
        shop_ids = {item.shop_id for item in items}
        if len(shop_ids) != 1:
            raise ValidationException(
                "All items of an order must come from the same shop",
                field="items",
                details={"shop_ids": sorted(str(s) for s in shop_ids)},
            )

        return cls(
            id=generate_uuid(),
            user_id=user_id,
            shop_id=shop_ids.pop(),
            items=list(items),
            total_price=Money.sum([item.subtotal for item in items]),
            status=payment_method.initial_order_status(),
            payment=PaymentDetails(method=payment_method),
            notes=notes,
        )

    # Queries

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    def computed_total(self) -> Money:
        return Money.sum([item.subtotal for item in self.items])

    def has_consistent_total(self) -> bool:
        return self.total_price == self.computed_total()

    def gateway_amount(self) -> int:
        """
        Whole-rupiah amount charged through the payment gateway.

        Summed from the rounded unit prices, so it always equals the total
        of the item lines sent with the charge.
        """
        return sum(item.unit_price.to_minor_int() * item.quantity for item in self.items)

    @property
    def is_pay_at_store(self) -> bool:
        return self.payment.method is PaymentMethod.PAY_AT_STORE

    @property
    def is_online_payment(self) -> bool:
        return self.payment.method is PaymentMethod.ONLINE_PAYMENT

    @property
    def gateway_order_id(self) -> str | None:
        return self.payment.gateway_order_id

    # Customer transitions

    def cancel_by_customer(self) -> None:
        """
        Cancel on behalf of the owning customer.

        Only AWAITING_PAYMENT and PENDING_CONFIRMATION orders can be
        cancelled; the caller is responsible for releasing stock.
        """
        if not self.status.can_be_cancelled_by_customer():
            raise InvalidStateTransitionException(
                self.status.value,
                OrderStatus.CANCELLED.value,
                message=f"Order cannot be cancelled because its status is '{self.status.value}'",
            )
        self.status = OrderStatus.CANCELLED
        self.payment.status = PaymentStatus.CANCELLED_BY_USER
        self.cancelled_at = utcnow()
        self.touch()

    # Seller transitions

    def change_status_by_seller(self, new_status: OrderStatus) -> OrderStatus:
        """
        Apply a seller-requested fulfillment transition.

        Returns:
            The previous status

        Raises:
            InvalidStateTransitionException: with a reason specific to the
                rule that rejected the request
        """
        current = self.status
        if new_status is current:
            raise InvalidStateTransitionException(
                current.value, new_status.value, message=f"Order is already '{current.value}'"
            )
        if current.is_terminal():
            raise InvalidStateTransitionException(
                current.value,
                new_status.value,
                message=f"Order is '{current.value}' and can no longer change status",
            )

        allowed_from = new_status.seller_sources_for()
        if not allowed_from:
            raise InvalidStateTransitionException(
                current.value,
                new_status.value,
                message=f"Status '{new_status.value}' cannot be set by the seller",
            )
        if current not in allowed_from:
            expected = ", ".join(sorted(s.value for s in allowed_from))
            raise InvalidStateTransitionException(
                current.value,
                new_status.value,
                message=(
                    f"Status '{new_status.value}' can only be set from {expected}; "
                    f"order is currently '{current.value}'"
                ),
            )

        self._check_seller_payment_guards(current, new_status)

        self.status = new_status
        if new_status is OrderStatus.COMPLETED:
            self.completed_at = utcnow()
        self.touch()
        return current

    def _check_seller_payment_guards(self, current: OrderStatus, new_status: OrderStatus) -> None:
        if new_status is OrderStatus.CONFIRMED and not self.is_pay_at_store:
            raise InvalidStateTransitionException(
                current.value,
                new_status.value,
                message="Only pay-at-store orders are confirmed by the seller",
            )
        if new_status is OrderStatus.PROCESSING:
            if current is OrderStatus.CONFIRMED and not self.is_pay_at_store:
                raise InvalidStateTransitionException(
                    current.value,
                    new_status.value,
                    message="Only pay-at-store orders move from CONFIRMED to PROCESSING",
                )
            if current is OrderStatus.AWAITING_PAYMENT:
                if not self.is_online_payment:
                    raise InvalidStateTransitionException(
                        current.value,
                        new_status.value,
                        message="Only online-payment orders move from AWAITING_PAYMENT to PROCESSING",
                    )
                if not self.payment.is_paid:
                    raise InvalidStateTransitionException(
                        current.value,
                        new_status.value,
                        message="Online payment has not been received yet",
                    )
        if new_status is OrderStatus.COMPLETED and self.is_pay_at_store and not self.payment.is_paid:
            raise InvalidStateTransitionException(
                current.value,
                new_status.value,
                message="Confirm the in-store payment before completing the order",
            )

    def confirm_store_payment(self, notes: str | None = None, proof_image_urls: list[str] | None = None) -> None:
        """
        Record that the customer paid in store.

        Proof URLs accumulate across calls. The order status is unchanged.
        """
        if not self.is_pay_at_store:
            raise ValidationException(
                "Only pay-at-store orders can have their payment confirmed by the seller",
                field="payment_method",
            )
        if self.status is OrderStatus.CANCELLED:
            raise InvalidStateTransitionException(
                self.status.value,
                message="Cannot confirm payment for a cancelled order",
            )

        if not self.payment.is_paid:
            self.payment.paid_at = utcnow()
        self.payment.status = PaymentStatus.PAID
        if proof_image_urls:
            self.payment.proof_image_urls.extend(proof_image_urls)
        if notes:
            self.payment.confirmation_notes = notes
        self.touch()

    # Gateway payment

    def ensure_gateway_payable(self) -> None:
        """
        Guard for starting or retrying a gateway payment.

        Raises:
            ValidationException: not an online-payment order, or already paid
            InvalidStateTransitionException: order not awaiting payment
        """
        if not self.is_online_payment:
            raise ValidationException("This order does not use online payment", field="payment_method")
        if self.payment.is_paid:
            raise ValidationException("This order has already been paid")
        if not self.status.accepts_gateway_payment():
            raise InvalidStateTransitionException(
                self.status.value,
                message=f"Orders with status '{self.status.value}' cannot start a new payment",
            )

    def has_reusable_payment_token(self, now: datetime | None = None) -> bool:
        """True when the current gateway token can be handed out again."""
        if not (self.payment.snap_token and self.payment.redirect_url):
            return False
        if not self.status.accepts_gateway_payment() or self.payment.status.is_failure():
            return False
        if self.payment.token_expires_at is None:
            return True
        return self.payment.token_expires_at > (now or utcnow())

    def attach_gateway_transaction(
        self,
        gateway_order_id: str,
        snap_token: str,
        redirect_url: str,
        token_expires_at: datetime | None = None,
    ) -> None:
        """Store a freshly created gateway transaction and mark the order awaiting it."""
        self.payment.gateway_order_id = gateway_order_id
        self.payment.snap_token = snap_token
        self.payment.redirect_url = redirect_url
        self.payment.token_expires_at = token_expires_at
        self.payment.gateway_transaction_id = None
        self.payment.status = PaymentStatus.PENDING_GATEWAY_PAYMENT
        self.status = OrderStatus.AWAITING_PAYMENT
        self.touch()

    def apply_gateway_outcome(
        self,
        outcome: GatewayOutcome | None,
        transaction_id: str | None = None,
        payment_type: str | None = None,
    ) -> bool:
        """
        Reconcile a gateway report into this order.

        Returns:
            True if the order changed. Unchanged reports, reports for
            orders that are no longer payable and anything that would
            regress a paid payment are no-ops.
        """
        if outcome is None or self.payment.is_paid:
            return False
        if not self.status.accepts_gateway_payment():
            return False
        if outcome.order_status is OrderStatus.PROCESSING and self.status is not OrderStatus.AWAITING_PAYMENT:
            return False
        if outcome.order_status is self.status and outcome.payment_status is self.payment.status:
            return False

        self.status = outcome.order_status
        self.payment.status = outcome.payment_status
        if transaction_id:
            self.payment.gateway_transaction_id = transaction_id
        if payment_type:
            self.payment.payment_type = payment_type
        if outcome.is_success:
            self.payment.paid_at = utcnow()
        self.touch()
        return True

    # Serialization

    def to_summary_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": self.user_id,
            "shop_id": str(self.shop_id) if self.shop_id else None,
            "status": self.status.value,
            "payment_method": self.payment.method.value,
            "payment_status": self.payment.status.value,
            "total_price": float(self.total_price.amount),
            "items_count": len(self.items),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    def to_detail_dict(self) -> dict[str, Any]:
        return {
            **self.to_summary_dict(),
            "items": [item.to_dict() for item in self.items],
            "payment_details": self.payment.to_dict(),
            "notes": self.notes,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


__all__ = ["Order", "OrderItem", "PaymentDetails"]
