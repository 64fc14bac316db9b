"""
End-to-end tests through the HTTP surface.

The application is built by the real factory and container, on SQLite,
with the Midtrans network stubbed by ``httpx.MockTransport``. The lifespan
is not run: the fixtures put the container on ``app.state`` themselves.
"""

from uuid import uuid4

import httpx
import pytest
import pytest_asyncio
from jose import jwt

from marketplace.clients import MidtransClient
from marketplace.core.app_factory import create_app
from marketplace.core.container import CommerceContainer
from marketplace.domains.commerce.infrastructure.repositories import SQLAlchemyOrderRepository
from marketplace.domains.commerce.infrastructure.services import compute_signature

SERVER_KEY = "SB-Mid-server-test"


def bearer(uid: str, secret: str = "test-secret", **claims) -> dict[str, str]:
    token = jwt.encode({"sub": uid, **claims}, secret, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


CUSTOMER = bearer("customer-1", name="Budi Santoso", email="budi@example.com")
SELLER = bearer("seller-1")
INTRUDER = bearer("intruder-1")


class FakeMidtrans:
    """Answers Snap and status requests; ``status`` is returned for every status query."""

    def __init__(self):
        self.status = "pending"
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/transactions"):
            return httpx.Response(201, json={"token": "snap-1", "redirect_url": "https://pay.example/snap-1"})
        gateway_order_id = request.url.path.split("/")[-2]
        return httpx.Response(
            200,
            json={
                "status_code": "200",
                "order_id": gateway_order_id,
                "transaction_status": self.status,
                "transaction_id": "trx-1",
                "payment_type": "bank_transfer",
                "gross_amount": "20000.00",
            },
        )


@pytest.fixture
def midtrans():
    return FakeMidtrans()


@pytest_asyncio.fixture
async def client(test_settings, database, catalog, midtrans):
    app = create_app(test_settings)
    midtrans_client = MidtransClient(test_settings, transport=httpx.MockTransport(midtrans))
    app.state.container = CommerceContainer.build(test_settings, database, midtrans_client)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    await midtrans_client.aclose()


async def place_order(client, catalog, payment_method="ONLINE_PAYMENT", quantity=2) -> dict:
    response = await client.post(
        "/api/v1/cart/items", json={"product_id": str(catalog.coffee_id), "quantity": quantity}, headers=CUSTOMER
    )
    assert response.status_code == 201
    response = await client.post("/api/v1/orders", json={"payment_method": payment_method}, headers=CUSTOMER)
    assert response.status_code == 201
    return response.json()["data"]


@pytest.mark.integration
class TestPublicEndpoints:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/health", "/api/v1/health"])
    async def test_health(self, client, path):
        response = await client.get(path)

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    @pytest.mark.asyncio
    async def test_client_key_needs_no_token(self, client):
        response = await client.get("/api/v1/payments/client-key")

        assert response.status_code == 200
        assert response.json()["data"] == {"client_key": "SB-Mid-client-test", "is_production": False}


@pytest.mark.integration
class TestAuthentication:
    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        response = await client.get("/api/v1/cart")

        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_REQUIRED"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_token_signed_with_another_key(self, client):
        response = await client.get("/api/v1/cart", headers=bearer("customer-1", secret="wrong"))

        assert response.status_code == 401


@pytest.mark.integration
class TestErrorEnvelope:
    @pytest.mark.asyncio
    async def test_unknown_product_is_404(self, client):
        response = await client.post("/api/v1/cart/items", json={"product_id": str(uuid4())}, headers=CUSTOMER)

        body = response.json()
        assert response.status_code == 404
        assert body == {"success": False, "message": body["message"], "code": "NOT_FOUND"}

    @pytest.mark.asyncio
    async def test_insufficient_stock_carries_details(self, client, catalog):
        response = await client.post(
            "/api/v1/cart/items", json={"product_id": str(catalog.coffee_id), "quantity": 9}, headers=CUSTOMER
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "INSUFFICIENT_STOCK"
        assert body["details"]["available"] == 5

    @pytest.mark.asyncio
    async def test_request_validation_is_400(self, client, catalog):
        response = await client.post(
            "/api/v1/cart/items", json={"product_id": str(catalog.coffee_id), "quantity": 0}, headers=CUSTOMER
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_empty_cart_checkout(self, client):
        response = await client.post("/api/v1/orders", json={"payment_method": "PAY_AT_STORE"}, headers=CUSTOMER)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_foreign_order_is_403(self, client, catalog):
        order = await place_order(client, catalog)

        response = await client.get(f"/api/v1/orders/{order['id']}", headers=INTRUDER)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_notification_is_404(self, client):
        response = await client.post(f"/api/v1/notifications/{uuid4()}/read", headers=CUSTOMER)

        assert response.status_code == 404


@pytest.mark.integration
class TestCheckoutAndPayment:
    @pytest.mark.asyncio
    async def test_online_payment_flow(self, client, catalog, midtrans):
        # Arrange
        order = await place_order(client, catalog)
        assert order["status"] == "AWAITING_PAYMENT"

        # Act
        charge = await client.post(f"/api/v1/payments/{order['id']}/charge", headers=CUSTOMER)
        again = await client.post(f"/api/v1/payments/{order['id']}/charge", headers=CUSTOMER)
        midtrans.status = "settlement"
        status = await client.get(f"/api/v1/payments/{order['id']}/status", headers=CUSTOMER)
        detail = await client.get(f"/api/v1/orders/{order['id']}", headers=CUSTOMER)
        inbox = await client.get("/api/v1/notifications", headers=CUSTOMER)

        # Assert
        assert charge.status_code == 200
        assert charge.json()["data"]["token"] == "snap-1"
        assert charge.json()["data"]["gateway_order_id"].startswith(f"{order['id']}-")
        assert again.json()["data"]["reused"] is True
        assert status.json()["data"]["internal_order_status"] == "PROCESSING"
        assert status.json()["data"]["updated"] is True
        assert detail.json()["data"]["payment_status"] == "paid"
        assert "Payment received" in [item["title"] for item in inbox.json()["data"]]

        snap_requests = [r for r in midtrans.requests if r.url.path.endswith("/transactions")]
        assert len(snap_requests) == 1

    @pytest.mark.asyncio
    async def test_cancel_returns_stock(self, client, catalog):
        order = await place_order(client, catalog, payment_method="PAY_AT_STORE")

        response = await client.post(f"/api/v1/orders/{order['id']}/cancel", headers=CUSTOMER)
        listing = await client.get("/api/v1/orders", params={"status": "cancelled"}, headers=CUSTOMER)
        second = await client.post(f"/api/v1/orders/{order['id']}/cancel", headers=CUSTOMER)

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "CANCELLED"
        assert listing.json()["data"]["count"] == 1
        assert second.status_code == 400

    @pytest.mark.asyncio
    async def test_seller_workflow(self, client, catalog):
        # Arrange
        order = await place_order(client, catalog, payment_method="PAY_AT_STORE")

        # Act
        confirmed = await client.patch(
            f"/api/v1/seller/orders/{order['id']}/status", json={"status": "confirmed"}, headers=SELLER
        )
        paid = await client.post(
            f"/api/v1/seller/orders/{order['id']}/confirm-payment",
            data={"notes": "Cash"},
            files=[("proof_images", ("receipt.jpg", b"\xff\xd8jpeg", "image/jpeg"))],
            headers=SELLER,
        )
        stats = await client.get("/api/v1/seller/orders/statistics", headers=SELLER)
        forbidden = await client.patch(
            f"/api/v1/seller/orders/{order['id']}/status", json={"status": "PROCESSING"}, headers=INTRUDER
        )

        # Assert
        assert confirmed.status_code == 200
        assert confirmed.json()["data"]["status"] == "CONFIRMED"
        assert paid.status_code == 200
        urls = paid.json()["data"]["uploaded_urls"]
        assert len(urls) == 1
        assert urls[0].startswith("http://files.test/static/payment-proofs/")
        assert paid.json()["data"]["order"]["payment_status"] == "paid"
        assert stats.json()["data"]["status_counts"]["CONFIRMED"] == 1
        assert forbidden.status_code == 403


@pytest.mark.integration
class TestMidtransWebhook:
    @pytest.mark.asyncio
    async def test_dashboard_ping(self, client):
        response = await client.post("/api/v1/webhooks/midtrans/notification", json={"transaction_status": "x"})

        assert response.status_code == 200
        assert response.json()["message"] == "Test notification received"

    @pytest.mark.asyncio
    async def test_unparseable_body_is_acknowledged(self, client):
        response = await client.post("/api/v1/webhooks/midtrans/notification", content=b"not json")

        assert response.status_code == 200
        assert response.json()["message"] == "Notification ignored"

    @pytest.mark.asyncio
    async def test_signed_settlement_marks_order_paid(self, client, catalog):
        # Arrange
        order = await place_order(client, catalog)
        charge = await client.post(f"/api/v1/payments/{order['id']}/charge", headers=CUSTOMER)
        gateway_order_id = charge.json()["data"]["gateway_order_id"]
        payload = {
            "order_id": gateway_order_id,
            "status_code": "200",
            "gross_amount": "20000.00",
            "transaction_status": "settlement",
            "transaction_id": "trx-9",
            "signature_key": compute_signature(gateway_order_id, "200", "20000.00", SERVER_KEY),
        }

        # Act
        response = await client.post("/api/v1/webhooks/midtrans/notification", json=payload)
        detail = await client.get(f"/api/v1/orders/{order['id']}", headers=CUSTOMER)

        # Assert
        assert response.status_code == 200
        assert response.json()["reason"] == "updated"
        assert detail.json()["data"]["status"] == "PROCESSING"
        assert detail.json()["data"]["payment_details"]["gateway_transaction_id"] == "trx-9"

    @pytest.mark.asyncio
    async def test_bad_signature_is_ignored(self, client, catalog):
        order = await place_order(client, catalog)
        payload = {
            "order_id": f"{order['id']}-1714550400000",
            "status_code": "200",
            "gross_amount": "20000.00",
            "transaction_status": "settlement",
            "signature_key": "0" * 128,
        }

        response = await client.post("/api/v1/webhooks/midtrans/notification", json=payload)
        detail = await client.get(f"/api/v1/orders/{order['id']}", headers=CUSTOMER)

        assert response.status_code == 200
        assert response.json()["reason"] == "invalid_signature"
        assert detail.json()["data"]["status"] == "AWAITING_PAYMENT"

    @pytest.mark.asyncio
    async def test_processing_failure_is_still_acknowledged(self, client, catalog, monkeypatch):
        # Arrange
        order = await place_order(client, catalog)
        charge = await client.post(f"/api/v1/payments/{order['id']}/charge", headers=CUSTOMER)
        gateway_order_id = charge.json()["data"]["gateway_order_id"]
        payload = {
            "order_id": gateway_order_id,
            "status_code": "200",
            "gross_amount": "20000.00",
            "transaction_status": "settlement",
            "signature_key": compute_signature(gateway_order_id, "200", "20000.00", SERVER_KEY),
        }

        async def failing_save(self, order):
            raise RuntimeError("db down")

        monkeypatch.setattr(SQLAlchemyOrderRepository, "save", failing_save)

        # Act
        response = await client.post("/api/v1/webhooks/midtrans/notification", json=payload)

        # Assert
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Notification received", "reason": "internal_error"}
