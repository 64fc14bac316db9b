"""
Midtrans API Client

Async client for the Midtrans Snap and Core APIs using HTTP Basic auth
(server key as username, empty password).

Connection Details:
    - Snap URL: https://app[.sandbox].midtrans.com/snap/v1
    - Core URL: https://api[.sandbox].midtrans.com/v2

Endpoints:
    - POST {snap}/transactions - Create a Snap transaction (token + redirect URL)
    - GET {core}/{order_id}/status - Get transaction status

Documentation:
    - https://docs.midtrans.com/reference/backend-integration
"""

from __future__ import annotations

import base64
import logging
from typing import Any

import httpx

from marketplace.config.settings import Settings

logger = logging.getLogger(__name__)


class MidtransError(Exception):
    """
    Base exception for Midtrans errors.

    Attributes:
        error_code: Machine-readable error code
        error_message: Human-readable error description
    """

    def __init__(self, error_code: str, error_message: str):
        self.error_code = error_code
        self.error_message = error_message
        super().__init__(f"{error_code}: {error_message}")


class MidtransAPIError(MidtransError):
    """
    Structured error returned by Midtrans.

    ``status_code`` is the Midtrans status code, which may differ from the
    HTTP status (the Core API answers 200 with ``"status_code": "404"``).
    """

    def __init__(self, status_code: int, message: str, response: dict[str, Any] | None = None):
        self.status_code = status_code
        self.response = response or {}
        super().__init__("API_ERROR", message)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class MidtransTimeoutError(MidtransError):
    """Request timed out."""

    def __init__(self, message: str):
        super().__init__("TIMEOUT", message)


class MidtransConnectionError(MidtransError):
    """Network connectivity issues."""

    def __init__(self, message: str):
        super().__init__("CONNECTION_ERROR", message)


def _error_message(data: dict[str, Any], default: str) -> str:
    messages = data.get("error_messages")
    if isinstance(messages, list) and messages:
        return ", ".join(str(m) for m in messages)
    return str(data.get("status_message") or default)


class MidtransClient:
    """
    Async HTTP client for Midtrans.

    Long-lived: the application creates one at startup and closes it on
    shutdown. Tests pass an ``httpx`` transport to stub the network.

    Example:
        async with MidtransClient(settings) as client:
            result = await client.create_snap_transaction(params)
            # result["token"], result["redirect_url"]
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self._server_key = settings.MIDTRANS_SERVER_KEY
        self._client_key = settings.MIDTRANS_CLIENT_KEY
        self._snap_base_url = settings.midtrans_snap_base_url
        self._api_base_url = settings.midtrans_api_base_url
        self._is_production = settings.MIDTRANS_IS_PRODUCTION

        if not self._server_key:
            logger.error("MIDTRANS_SERVER_KEY not configured")

        auth = base64.b64encode(f"{self._server_key}:".encode()).decode()
        self._client = httpx.AsyncClient(
            headers={
                "Authorization": f"Basic {auth}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=settings.MIDTRANS_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> MidtransClient:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def server_key(self) -> str:
        return self._server_key

    @property
    def client_key(self) -> str:
        return self._client_key

    @property
    def is_production(self) -> bool:
        return self._is_production

    async def create_snap_transaction(self, params: dict[str, Any]) -> dict[str, Any]:
        """
        Create a Snap transaction.

        Args:
            params: Snap request body (transaction_details, item_details,
                customer_details, callbacks)

        Returns:
            dict with ``token`` and ``redirect_url``

        Raises:
            MidtransAPIError: Midtrans rejected the request
            MidtransTimeoutError: Request timed out
            MidtransConnectionError: Network error
        """
        order_id = params.get("transaction_details", {}).get("order_id")
        logger.info(f"Creating Midtrans transaction: order_id={order_id}")

        data = await self._request("POST", f"{self._snap_base_url}/transactions", json=params)
        if not data.get("token"):
            raise MidtransAPIError(502, "Midtrans response did not include a token", data)

        logger.info(f"Midtrans transaction created: order_id={order_id}")
        return data

    async def get_transaction_status(self, gateway_order_id: str) -> dict[str, Any]:
        """
        Get the status of a transaction.

        Args:
            gateway_order_id: The order_id sent when the transaction was created

        Returns:
            Status body (transaction_status, fraud_status, payment_type, ...)

        Raises:
            MidtransAPIError: Unknown transaction (``is_not_found``) or other error
            MidtransTimeoutError: Request timed out
            MidtransConnectionError: Network error
        """
        logger.info(f"Fetching Midtrans status: {gateway_order_id}")

        data = await self._request("GET", f"{self._api_base_url}/{gateway_order_id}/status")

        # Core API reports errors in the body with HTTP 200
        status_code = str(data.get("status_code", "200"))
        if status_code.isdigit() and int(status_code) >= 400:
            raise MidtransAPIError(int(status_code), _error_message(data, "Transaction status unavailable"), data)

        logger.info(f"Midtrans status for {gateway_order_id}: {data.get('transaction_status')}")
        return data

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Midtrans timeout error: {e}")
            raise MidtransTimeoutError(f"Midtrans request timed out: {e}") from e
        except httpx.TransportError as e:
            logger.error(f"Midtrans connection error: {e}")
            raise MidtransConnectionError(f"Could not connect to Midtrans: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 400:
            message = _error_message(data, f"HTTP {response.status_code}")
            logger.warning(f"Midtrans API error {response.status_code}: {message}")
            raise MidtransAPIError(response.status_code, message, data)

        if not isinstance(data, dict):
            raise MidtransAPIError(502, "Unexpected Midtrans response body")
        return data
