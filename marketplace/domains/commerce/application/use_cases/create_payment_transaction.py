"""
Payment Transaction Use Cases

Start (or retry) an online payment for an order at the payment gateway.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any
from uuid import UUID

from marketplace.core.domain import utcnow
from marketplace.domains.commerce.application.ports import (
    CustomerProfile,
    IPaymentGateway,
    IUnitOfWork,
)
from marketplace.domains.commerce.application.use_cases.order_access import ensure_customer_owns, load_order
from marketplace.domains.commerce.domain.entities import Order
from marketplace.domains.commerce.domain.services import build_gateway_order_id

logger = logging.getLogger(__name__)

DEFAULT_FIRST_NAME = "Pelanggan"
MAX_ITEM_NAME_LENGTH = 50


@dataclass
class PaymentTransactionRequest:
    """Request for starting a gateway payment."""

    order_id: UUID
    customer: CustomerProfile


@dataclass
class PaymentTransactionResponse:
    """Token and redirect URL for the payment page."""

    order_id: str
    token: str
    redirect_url: str
    gateway_order_id: str | None = None
    reused: bool = False
    message: str = "Payment transaction created successfully"

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "token": self.token,
            "redirect_url": self.redirect_url,
            "gateway_order_id": self.gateway_order_id,
            "reused": self.reused,
        }


def split_display_name(display_name: str | None) -> tuple[str, str]:
    """First word is the first name; the rest is the last name."""
    parts = (display_name or "").split()
    if not parts:
        return DEFAULT_FIRST_NAME, ""
    return parts[0], " ".join(parts[1:])


def build_transaction_params(
    order: Order,
    gateway_order_id: str,
    customer: CustomerProfile,
    frontend_base_url: str,
) -> dict[str, Any]:
    """Gateway transaction request: amount, line items, customer and callbacks."""
    first_name, last_name = split_display_name(customer.name)
    customer_details: dict[str, Any] = {"first_name": first_name, "last_name": last_name}
    if customer.email:
        customer_details["email"] = customer.email
    if customer.phone:
        customer_details["phone"] = customer.phone

    base = frontend_base_url.rstrip("/")
    callback = f"{base}/pesanan/{order.id}?payment_status={{status}}&transaction_id={gateway_order_id}"

    return {
        "transaction_details": {
            "order_id": gateway_order_id,
            "gross_amount": order.gateway_amount(),
        },
        "item_details": [
            {
                "id": str(item.product_id),
                "price": item.unit_price.to_minor_int(),
                "quantity": item.quantity,
                "name": item.name[:MAX_ITEM_NAME_LENGTH],
            }
            for item in order.items
        ],
        "customer_details": customer_details,
        "callbacks": {
            "finish": callback.format(status="finish"),
            "unfinish": callback.format(status="unfinish"),
            "error": callback.format(status="error"),
        },
    }


class CreatePaymentTransactionUseCase:
    """
    Use Case: Create Payment Transaction

    Hands back the current token when it is still usable, so repeated calls
    before payment do not create duplicate gateway transactions. Otherwise
    mints a new gateway-assigned id, creates the transaction and stores
    token, redirect URL and id on the order.

    The gateway call happens outside any database transaction; the order is
    re-read under lock and re-validated before the result is stored.
    """

    retry = False

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        gateway: IPaymentGateway,
        frontend_base_url: str,
        token_ttl: timedelta = timedelta(hours=24),
    ):
        self.uow_factory = uow_factory
        self.gateway = gateway
        self.frontend_base_url = frontend_base_url
        self.token_ttl = token_ttl

    async def execute(self, request: PaymentTransactionRequest) -> PaymentTransactionResponse:
        async with self.uow_factory() as uow:
            order = await load_order(uow, request.order_id)
            ensure_customer_owns(order, request.customer.uid, "pay_order")
            reusable = self._reusable(order)
            if reusable:
                return reusable
            order.ensure_gateway_payable()

        gateway_order_id = build_gateway_order_id(str(order.id), retry=self.retry)
        params = build_transaction_params(order, gateway_order_id, request.customer, self.frontend_base_url)

        logger.info(f"[PAYMENT] Creating gateway transaction {gateway_order_id} for order {order.id}")
        transaction = await self.gateway.create_transaction(params)

        async with self.uow_factory() as uow:
            order = await load_order(uow, request.order_id, for_update=True)
            reusable = self._reusable(order)
            if reusable:
                logger.warning(
                    f"[PAYMENT] Order {order.id} got a token concurrently; "
                    f"discarding gateway transaction {gateway_order_id}"
                )
                return reusable
            order.ensure_gateway_payable()
            order.attach_gateway_transaction(
                gateway_order_id=gateway_order_id,
                snap_token=transaction.token,
                redirect_url=transaction.redirect_url,
                token_expires_at=utcnow() + self.token_ttl,
            )
            await uow.orders.save(order)

        return PaymentTransactionResponse(
            order_id=str(order.id),
            token=transaction.token,
            redirect_url=transaction.redirect_url,
            gateway_order_id=gateway_order_id,
            message=self._created_message(),
        )

    def _reusable(self, order: Order) -> PaymentTransactionResponse | None:
        if self.retry:
            return None
        if not order.is_online_payment or not order.has_reusable_payment_token():
            return None
        logger.info(f"[PAYMENT] Reusing existing payment token for order {order.id}")
        return PaymentTransactionResponse(
            order_id=str(order.id),
            token=order.payment.snap_token or "",
            redirect_url=order.payment.redirect_url or "",
            gateway_order_id=order.payment.gateway_order_id,
            reused=True,
            message="A payment transaction already exists, please continue the payment",
        )

    def _created_message(self) -> str:
        return "Payment transaction created successfully"


class RetryPaymentTransactionUseCase(CreatePaymentTransactionUseCase):
    """
    Use Case: Retry Payment Transaction

    Always mints a new ``{orderId}-RETRY-{timestamp}`` gateway id and never
    reuses a token; a PAYMENT_FAILED order returns to AWAITING_PAYMENT.
    """

    retry = True

    def _created_message(self) -> str:
        return "A new payment transaction has been created, please complete the payment"


__all__ = [
    "PaymentTransactionRequest",
    "PaymentTransactionResponse",
    "CreatePaymentTransactionUseCase",
    "RetryPaymentTransactionUseCase",
    "build_transaction_params",
    "split_display_name",
]
