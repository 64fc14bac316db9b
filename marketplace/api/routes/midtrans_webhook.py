"""
Midtrans Webhook Handler

Receives transaction status notifications from Midtrans and reconciles
the matching order.

Webhook Flow:
1. Midtrans sends POST with order_id, status_code, gross_amount, signature_key
2. No order_id: dashboard test ping, acknowledged without processing
3. Verify SHA-512 signature with the server key
4. Resolve the order from the gateway-assigned order id
5. Apply the mapped status transition (same mapping as polling)

Endpoint: POST /api/v1/webhooks/midtrans/notification

Note: Every notification that was received and understood is answered with
200, including ignored ones (bad signature, unknown order, stale attempt)
and ones whose processing failed internally. Failures are logged with the
traceback and answered with reason "internal_error"; the order is
reconciled later by status polling.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from marketplace.api.dependencies import get_container
from marketplace.core.container import CommerceContainer
from marketplace.domains.commerce.application.ports import GatewayStatusReport
from marketplace.domains.commerce.application.use_cases import (
    GatewayNotificationRequest,
    HandleGatewayNotificationUseCase,
)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])
logger = logging.getLogger(__name__)


class MidtransNotificationPayload(BaseModel):
    """
    Midtrans HTTP notification body.

    Example:
        {"order_id": "<uuid>-1718000000000", "status_code": "200",
         "gross_amount": "150000.00", "signature_key": "...",
         "transaction_status": "settlement", "payment_type": "bank_transfer"}
    """

    model_config = ConfigDict(extra="allow")

    order_id: str | None = None
    status_code: str | None = None
    gross_amount: str | None = None
    signature_key: str | None = None
    transaction_status: str | None = None
    fraud_status: str | None = None
    payment_type: str | None = None
    transaction_id: str | None = None

    @field_validator("status_code", "gross_amount", mode="before")
    @classmethod
    def coerce_to_str(cls, value: Any) -> Any:
        if isinstance(value, int | float):
            return str(value)
        return value

    def to_report(self) -> GatewayStatusReport:
        raw = self.model_dump(exclude={"signature_key"})
        return GatewayStatusReport(
            gateway_order_id=self.order_id or "",
            transaction_status=self.transaction_status,
            fraud_status=self.fraud_status,
            payment_type=self.payment_type,
            transaction_id=self.transaction_id,
            status_code=self.status_code,
            gross_amount=self.gross_amount,
            raw=raw,
        )


def get_handle_gateway_notification_use_case(
    container: CommerceContainer = Depends(get_container),  # noqa: B008
) -> HandleGatewayNotificationUseCase:
    return container.create_handle_gateway_notification_use_case()


def _ack(message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=200, content={"success": True, "message": message, **extra})


@router.post("/midtrans/notification")
async def midtrans_notification(
    request: Request,
    use_case: HandleGatewayNotificationUseCase = Depends(get_handle_gateway_notification_use_case),  # noqa: B008
) -> JSONResponse:
    """Handle Midtrans transaction notifications."""
    body = await request.body()
    try:
        payload = MidtransNotificationPayload.model_validate(json.loads(body or b"{}"))
    except (ValueError, ValidationError) as e:
        logger.warning(f"[MIDTRANS-WEBHOOK] Unparseable notification body: {e}")
        return _ack("Notification ignored")

    if not payload.order_id:
        logger.info("[MIDTRANS-WEBHOOK] Test notification received (no order_id)")
        return _ack("Test notification received")

    logger.info(
        f"[MIDTRANS-WEBHOOK] Notification for {payload.order_id}: "
        f"status={payload.transaction_status}, fraud={payload.fraud_status}"
    )

    try:
        result = await use_case.execute(
            GatewayNotificationRequest(report=payload.to_report(), signature_key=payload.signature_key)
        )
    except Exception as e:
        logger.error(f"[MIDTRANS-WEBHOOK] Error processing {payload.order_id}: {e}", exc_info=True)
        return _ack("Notification received", reason="internal_error")

    return _ack(
        "Notification processed" if result.processed else "Notification ignored",
        reason=result.reason,
    )
