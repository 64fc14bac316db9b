"""
Payment Reconciliation Use Cases

Bring the order in line with what the payment gateway reports, either
because the customer polls (status endpoint) or because the gateway calls
the webhook. Both paths share ``map_gateway_status`` and
``Order.apply_gateway_outcome``, so an unchanged report never writes.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from marketplace.core.domain import EntityNotFoundException, ValidationException
from marketplace.domains.commerce.application.ports import (
    GatewayStatusReport,
    INotificationDispatcher,
    IPaymentGateway,
    IUnitOfWork,
)
from marketplace.domains.commerce.application.use_cases.order_access import (
    ensure_customer_owns,
    load_order,
    short_order_ref,
)
from marketplace.domains.commerce.domain.entities import Order
from marketplace.domains.commerce.domain.services import (
    GatewayOutcome,
    extract_order_id,
    map_gateway_status,
    status_message,
)
from marketplace.domains.commerce.domain.value_objects import OrderStatus

logger = logging.getLogger(__name__)


async def _notify_payment_change(
    notifier: INotificationDispatcher,
    order: Order,
    shop_owner_id: str | None,
) -> None:
    ref = short_order_ref(order)
    data = {"order_id": str(order.id), "status": order.status.value, "type": "payment_status"}
    if order.payment.is_paid:
        await notifier.notify(order.user_id, "Payment received", f"Payment for order #{ref} was received.", data)
        if shop_owner_id:
            await notifier.notify(
                shop_owner_id, "Order paid", f"Order #{ref} has been paid and is ready to process.", data
            )
    elif order.status is OrderStatus.PAYMENT_FAILED:
        await notifier.notify(
            order.user_id,
            "Payment failed",
            f"Payment for order #{ref} did not go through. You can retry the payment.",
            data,
        )


@dataclass
class PaymentStatusRequest:
    order_id: UUID
    user_id: str


@dataclass
class PaymentStatusResponse:
    """Gateway report summary plus the internal state after reconciliation."""

    order_id: str
    message: str
    gateway_status: dict[str, Any] = field(default_factory=dict)
    order_status: str = ""
    payment_status: str = ""
    updated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "payment_gateway_status": self.gateway_status,
            "internal_order_status": self.order_status,
            "internal_payment_status": self.payment_status,
            "updated": self.updated,
        }


class ReconcilePaymentStatusUseCase:
    """
    Use Case: Poll and Reconcile Payment Status

    Queries the gateway by the order's current gateway-assigned id, applies
    the mapped transition only when it differs from the stored state, and
    returns the user-facing message for the reported status.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        gateway: IPaymentGateway,
        notifier: INotificationDispatcher,
    ):
        self.uow_factory = uow_factory
        self.gateway = gateway
        self.notifier = notifier

    async def execute(self, request: PaymentStatusRequest) -> PaymentStatusResponse:
        async with self.uow_factory() as uow:
            order = await load_order(uow, request.order_id)
            ensure_customer_owns(order, request.user_id, "view_payment_status")
            if not order.is_online_payment:
                raise ValidationException("This order does not use online payment", field="payment_method")
            gateway_order_id = order.gateway_order_id
            if not gateway_order_id:
                raise EntityNotFoundException(
                    "PaymentTransaction",
                    request.order_id,
                    message="No payment transaction found for this order. Please complete the payment first.",
                )

        logger.info(f"[PAYMENT] Polling gateway status for {gateway_order_id} (order {request.order_id})")
        report = await self.gateway.get_status(gateway_order_id)
        outcome = map_gateway_status(report.transaction_status, report.fraud_status)

        shop_owner_id: str | None = None
        async with self.uow_factory() as uow:
            order = await load_order(uow, request.order_id, for_update=True)
            updated = order.apply_gateway_outcome(outcome, report.transaction_id, report.payment_type)
            if updated:
                await uow.orders.save(order)
                shop = await uow.shops.get(order.shop_id) if order.shop_id else None
                shop_owner_id = shop.owner_id if shop else None

        if updated:
            logger.info(
                f"[PAYMENT] Order {order.id} reconciled to {order.status.value}/{order.payment.status.value} "
                f"(gateway: {report.transaction_status})"
            )
            await _notify_payment_change(self.notifier, order, shop_owner_id)

        return PaymentStatusResponse(
            order_id=str(order.id),
            message=status_message(report.transaction_status, order_updated=updated),
            gateway_status={
                "transaction_status": report.transaction_status,
                "fraud_status": report.fraud_status,
                "payment_type": report.payment_type,
                "transaction_id": report.transaction_id,
            },
            order_status=order.status.value,
            payment_status=order.payment.status.value,
            updated=updated,
        )


@dataclass
class GatewayNotificationRequest:
    """Inbound webhook payload, already parsed."""

    report: GatewayStatusReport
    signature_key: str | None = None


@dataclass
class GatewayNotificationResult:
    """What the webhook did with a notification (never surfaced to the gateway)."""

    processed: bool
    reason: str
    order_id: str | None = None
    updated: bool = False


class HandleGatewayNotificationUseCase:
    """
    Use Case: Handle Gateway Notification (webhook)

    Verifies the signature before trusting anything in the payload, then
    applies the same mapping as polling. Notifications for an earlier
    payment attempt of the order are ignored unless they report success.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        gateway: IPaymentGateway,
        notifier: INotificationDispatcher,
    ):
        self.uow_factory = uow_factory
        self.gateway = gateway
        self.notifier = notifier

    async def execute(self, request: GatewayNotificationRequest) -> GatewayNotificationResult:
        report = request.report
        if not report.gateway_order_id:
            return GatewayNotificationResult(processed=False, reason="ping")

        if not request.signature_key or not self.gateway.verify_signature(
            report.gateway_order_id,
            report.status_code or "",
            report.gross_amount or "",
            request.signature_key,
        ):
            logger.warning(f"[MIDTRANS-WEBHOOK] Invalid signature for {report.gateway_order_id}, ignoring")
            return GatewayNotificationResult(processed=False, reason="invalid_signature")

        outcome = map_gateway_status(report.transaction_status, report.fraud_status)

        shop_owner_id: str | None = None
        async with self.uow_factory() as uow:
            order = await self._resolve_order(uow, report.gateway_order_id)
            if order is None:
                logger.warning(f"[MIDTRANS-WEBHOOK] No order for {report.gateway_order_id}")
                return GatewayNotificationResult(processed=False, reason="order_not_found")

            skip_reason = self._skip_reason(order, report, outcome)
            if skip_reason:
                logger.info(f"[MIDTRANS-WEBHOOK] Order {order.id}: {skip_reason}, no change")
                return GatewayNotificationResult(processed=False, reason=skip_reason, order_id=str(order.id))

            updated = order.apply_gateway_outcome(outcome, report.transaction_id, report.payment_type)
            if updated:
                await uow.orders.save(order)
                shop = await uow.shops.get(order.shop_id) if order.shop_id else None
                shop_owner_id = shop.owner_id if shop else None

        if updated:
            logger.info(
                f"[MIDTRANS-WEBHOOK] Order {order.id} -> {order.status.value}/{order.payment.status.value} "
                f"(gateway: {report.transaction_status}, type: {report.payment_type})"
            )
            await _notify_payment_change(self.notifier, order, shop_owner_id)

        return GatewayNotificationResult(
            processed=True,
            reason="updated" if updated else "unchanged",
            order_id=str(order.id),
            updated=updated,
        )

    async def _resolve_order(self, uow: IUnitOfWork, gateway_order_id: str) -> Order | None:
        order = await uow.orders.find_by_gateway_order_id(gateway_order_id)
        if order is not None:
            return await uow.orders.get_for_update(order.id)  # type: ignore[arg-type]
        try:
            order_id = UUID(extract_order_id(gateway_order_id))
        except ValueError:
            return None
        return await uow.orders.get_for_update(order_id)

    @staticmethod
    def _skip_reason(order: Order, report: GatewayStatusReport, outcome: GatewayOutcome | None) -> str | None:
        is_current_attempt = order.gateway_order_id == report.gateway_order_id
        if not is_current_attempt and not (outcome and outcome.is_success):
            return "stale_attempt"
        if outcome and outcome.is_success and report.gross_amount:
            try:
                reported = Decimal(report.gross_amount)
            except InvalidOperation:
                return "amount_mismatch"
            charged = order.gateway_amount()
            if reported != Decimal(charged):
                logger.error(
                    f"[MIDTRANS-WEBHOOK] Amount mismatch for order {order.id}: "
                    f"gateway={report.gross_amount} charged={charged}"
                )
                return "amount_mismatch"
        return None


__all__ = [
    "PaymentStatusRequest",
    "PaymentStatusResponse",
    "ReconcilePaymentStatusUseCase",
    "GatewayNotificationRequest",
    "GatewayNotificationResult",
    "HandleGatewayNotificationUseCase",
]
