"""
Route contract tests with overridden dependencies.

Use cases are replaced with AsyncMocks so each test pins one mapping from
a use-case outcome to the HTTP status and envelope.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from marketplace.api.security import get_current_principal
from marketplace.core.app_factory import create_app
from marketplace.core.domain import (
    ConcurrencyException,
    ProductGoneException,
    UpstreamGatewayException,
)
from marketplace.domains.commerce.api import dependencies as deps
from marketplace.domains.commerce.application.ports import CustomerProfile
from marketplace.domains.commerce.application.use_cases import (
    CreateOrderResponse,
    PaymentTransactionResponse,
)

API_V1_STR = "/api/v1"


def mock_principal() -> CustomerProfile:
    """Authenticated customer for every request."""
    return CustomerProfile(uid="customer-1", name="Budi Santoso")


@pytest.fixture
def use_case():
    mock = MagicMock()
    mock.execute = AsyncMock()
    return mock


@pytest.fixture
def app(test_settings, use_case):
    """App with auth and every use-case provider overridden."""
    application = create_app(test_settings)
    application.dependency_overrides[get_current_principal] = mock_principal
    for provider in (
        deps.get_create_order_use_case,
        deps.get_update_order_status_use_case,
        deps.get_create_payment_transaction_use_case,
        deps.get_retry_payment_transaction_use_case,
        deps.get_user_orders_use_case,
    ):
        application.dependency_overrides[provider] = lambda: use_case
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.mark.integration
class TestGatewayErrorMapping:
    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            (UpstreamGatewayException.BAD_GATEWAY, status.HTTP_502_BAD_GATEWAY),
            (UpstreamGatewayException.TIMEOUT, status.HTTP_504_GATEWAY_TIMEOUT),
            (UpstreamGatewayException.UNAVAILABLE, status.HTTP_503_SERVICE_UNAVAILABLE),
        ],
    )
    def test_upstream_failures(self, client, use_case, kind, expected):
        use_case.execute.side_effect = UpstreamGatewayException(kind, "Payment gateway error")

        response = client.post(f"{API_V1_STR}/payments/{uuid4()}/charge")

        assert response.status_code == expected
        assert response.json()["code"] == "UPSTREAM_GATEWAY_ERROR"

    def test_retry_returns_new_token(self, client, use_case):
        # Arrange
        order_id = uuid4()
        use_case.execute.return_value = PaymentTransactionResponse(
            order_id=str(order_id),
            token="snap-2",
            redirect_url="https://pay.example/snap-2",
            gateway_order_id=f"{order_id}-RETRY-1714550400000",
        )

        # Act
        response = client.post(f"{API_V1_STR}/payments/{order_id}/retry")

        # Assert
        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["token"] == "snap-2"
        assert data["gateway_order_id"].endswith("-RETRY-1714550400000")
        request = use_case.execute.await_args.args[0]
        assert request.order_id == order_id
        assert request.customer.uid == "customer-1"


@pytest.mark.integration
class TestOrderRouteContracts:
    def test_create_order_passes_parsed_payment_method(self, client, use_case):
        use_case.execute.return_value = CreateOrderResponse(order={"id": "o-1", "status": "PENDING_CONFIRMATION"})

        response = client.post(f"{API_V1_STR}/orders", json={"payment_method": "pay_at_store", "notes": "Sore"})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json() == {
            "success": True,
            "message": "Order created successfully",
            "data": {"id": "o-1", "status": "PENDING_CONFIRMATION"},
        }
        request = use_case.execute.await_args.args[0]
        assert request.payment_method.value == "PAY_AT_STORE"
        assert request.notes == "Sore"

    def test_unknown_payment_method_is_rejected_at_the_boundary(self, client, use_case):
        response = client.post(f"{API_V1_STR}/orders", json={"payment_method": "BARTER"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        use_case.execute.assert_not_awaited()

    def test_product_gone_keeps_its_code(self, client, use_case):
        use_case.execute.side_effect = ProductGoneException(uuid4(), "Kopi Gayo 250g")

        response = client.post(f"{API_V1_STR}/orders", json={"payment_method": "ONLINE_PAYMENT"})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["code"] == "PRODUCT_GONE"

    def test_concurrent_update_is_409(self, client, use_case):
        order_id = uuid4()
        use_case.execute.side_effect = ConcurrencyException("Order", order_id, 3)

        response = client.patch(f"{API_V1_STR}/seller/orders/{order_id}/status", json={"status": "PROCESSING"})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["code"] == "CONCURRENCY_CONFLICT"

    def test_unknown_status_value(self, client, use_case):
        response = client.patch(f"{API_V1_STR}/seller/orders/{uuid4()}/status", json={"status": "SHIPPED"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        use_case.execute.assert_not_awaited()

    def test_unknown_status_filter(self, client, use_case):
        response = client.get(f"{API_V1_STR}/orders", params={"status": "lost"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_malformed_order_id(self, client, use_case):
        response = client.post(f"{API_V1_STR}/payments/not-a-uuid/charge")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
