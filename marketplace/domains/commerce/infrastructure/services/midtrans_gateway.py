"""
Midtrans Payment Gateway Adapter

Implements IPaymentGateway on top of MidtransClient, translating client
errors into UpstreamGatewayException / EntityNotFoundException.
"""

import hashlib
import hmac
import logging
from typing import Any

from marketplace.clients import (
    MidtransAPIError,
    MidtransClient,
    MidtransConnectionError,
    MidtransError,
    MidtransTimeoutError,
)
from marketplace.core.domain import EntityNotFoundException, UpstreamGatewayException
from marketplace.domains.commerce.application.ports import GatewayStatusReport, GatewayTransaction

logger = logging.getLogger(__name__)

GATEWAY_ERROR_MESSAGE = "Payment gateway could not process the request"


def compute_signature(gateway_order_id: str, status_code: str, gross_amount: str, server_key: str) -> str:
    """SHA-512 hex digest of order_id + status_code + gross_amount + server_key."""
    payload = f"{gateway_order_id}{status_code}{gross_amount}{server_key}"
    return hashlib.sha512(payload.encode("utf-8")).hexdigest()


def _translate(error: MidtransError) -> UpstreamGatewayException:
    if isinstance(error, MidtransTimeoutError):
        return UpstreamGatewayException(UpstreamGatewayException.TIMEOUT, "Payment gateway timed out", error)
    if isinstance(error, MidtransConnectionError):
        return UpstreamGatewayException(UpstreamGatewayException.UNAVAILABLE, "Payment gateway is unreachable", error)
    logger.error(f"Midtrans rejected the request: {error}")
    return UpstreamGatewayException(UpstreamGatewayException.BAD_GATEWAY, GATEWAY_ERROR_MESSAGE, error)


class MidtransPaymentGateway:
    """IPaymentGateway backed by the Midtrans Snap/Core APIs."""

    def __init__(self, client: MidtransClient):
        self.client = client

    @property
    def client_key(self) -> str:
        return self.client.client_key

    async def create_transaction(self, params: dict[str, Any]) -> GatewayTransaction:
        try:
            data = await self.client.create_snap_transaction(params)
        except MidtransError as e:
            raise _translate(e) from e
        token = data.get("token")
        if not token:
            logger.error(f"Midtrans Snap response without a token: {data}")
            raise UpstreamGatewayException(UpstreamGatewayException.BAD_GATEWAY, GATEWAY_ERROR_MESSAGE)
        return GatewayTransaction(token=token, redirect_url=data.get("redirect_url", ""))

    async def get_status(self, gateway_order_id: str) -> GatewayStatusReport:
        try:
            data = await self.client.get_transaction_status(gateway_order_id)
        except MidtransAPIError as e:
            if e.is_not_found:
                raise EntityNotFoundException(
                    "Transaction", gateway_order_id, message="Transaction not found at the payment gateway"
                ) from e
            raise _translate(e) from e
        except MidtransError as e:
            raise _translate(e) from e

        return GatewayStatusReport(
            gateway_order_id=str(data.get("order_id") or gateway_order_id),
            transaction_status=data.get("transaction_status"),
            fraud_status=data.get("fraud_status"),
            payment_type=data.get("payment_type"),
            transaction_id=data.get("transaction_id"),
            status_code=data.get("status_code"),
            gross_amount=data.get("gross_amount"),
            raw=data,
        )

    def verify_signature(self, gateway_order_id: str, status_code: str, gross_amount: str, signature: str) -> bool:
        if not self.client.server_key:
            logger.error("Cannot verify gateway signature: server key not configured")
            return False
        expected = compute_signature(gateway_order_id, status_code, gross_amount, self.client.server_key)
        return hmac.compare_digest(expected, signature.lower())
