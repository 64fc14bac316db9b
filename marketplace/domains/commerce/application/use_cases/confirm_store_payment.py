"""
Confirm Store Payment Use Case

Seller records that a pay-at-store order was paid, optionally attaching
proof images.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from marketplace.core.domain import ValidationException
from marketplace.domains.commerce.application.ports import (
    INotificationDispatcher,
    IProofStorage,
    IUnitOfWork,
)
from marketplace.domains.commerce.application.use_cases.order_access import (
    ensure_seller_owns,
    load_order,
    short_order_ref,
)

logger = logging.getLogger(__name__)


@dataclass
class ProofUpload:
    """One uploaded proof image."""

    filename: str
    content: bytes


@dataclass
class ConfirmStorePaymentRequest:
    """Request for confirming an in-store payment."""

    order_id: UUID
    seller_id: str
    notes: str | None = None
    proof_files: list[ProofUpload] = field(default_factory=list)


@dataclass
class ConfirmStorePaymentResponse:
    """Response from confirming an in-store payment."""

    order: dict[str, Any] = field(default_factory=dict)
    uploaded_urls: list[str] = field(default_factory=list)
    success: bool = True
    message: str = "Payment confirmed successfully"


class ConfirmStorePaymentUseCase:
    """
    Use Case: Confirm Pay-at-Store Payment

    Ownership and payment method are checked before anything is uploaded;
    the order is then re-read under lock and updated. Proof URLs are
    appended to the existing ones, and the order status is left as is.

    If an upload or the locked update fails (for example the order was
    cancelled in between), the files stored by this call are removed before
    the error propagates.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        storage: IProofStorage,
        notifier: INotificationDispatcher,
        max_files: int = 5,
    ):
        self.uow_factory = uow_factory
        self.storage = storage
        self.notifier = notifier
        self.max_files = max_files

    async def execute(self, request: ConfirmStorePaymentRequest) -> ConfirmStorePaymentResponse:
        if len(request.proof_files) > self.max_files:
            raise ValidationException(
                f"At most {self.max_files} proof images can be uploaded at once", field="proof_files"
            )

        async with self.uow_factory() as uow:
            order = await load_order(uow, request.order_id)
            await ensure_seller_owns(uow, order, request.seller_id, "confirm_payment")
            if not order.is_pay_at_store:
                raise ValidationException(
                    "Only pay-at-store orders can have their payment confirmed by the seller",
                    field="payment_method",
                )

        uploaded: list[str] = []
        try:
            for upload in request.proof_files:
                url = await self.storage.store(upload.content, upload.filename, str(request.order_id))
                uploaded.append(url)

            async with self.uow_factory() as uow:
                order = await load_order(uow, request.order_id, for_update=True)
                order.confirm_store_payment(notes=request.notes, proof_image_urls=uploaded)
                await uow.orders.save(order)
        except Exception:
            await self._discard(uploaded)
            raise

        logger.info(
            f"Order {order.id} store payment confirmed by seller {request.seller_id} "
            f"({len(uploaded)} proof image(s))"
        )

        await self.notifier.notify(
            order.user_id,
            "Payment confirmed",
            f"The shop confirmed your payment for order #{short_order_ref(order)}.",
            {"order_id": str(order.id), "type": "payment_confirmed"},
        )

        return ConfirmStorePaymentResponse(order=order.to_detail_dict(), uploaded_urls=uploaded)

    async def _discard(self, urls: list[str]) -> None:
        for url in urls:
            try:
                await self.storage.delete(url)
            except OSError as e:
                logger.warning(f"Could not remove orphaned proof {url}: {e}")


__all__ = [
    "ProofUpload",
    "ConfirmStorePaymentRequest",
    "ConfirmStorePaymentResponse",
    "ConfirmStorePaymentUseCase",
]
