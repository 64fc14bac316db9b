from fastapi import APIRouter

from marketplace.api.routes import midtrans_webhook
from marketplace.domains.commerce.api import routes as commerce

api_router = APIRouter()

# API routes (all have /api/v1 prefix from the app factory)
api_router.include_router(commerce.cart_router)
api_router.include_router(commerce.orders_router)
api_router.include_router(commerce.seller_router)
api_router.include_router(commerce.payments_router)
api_router.include_router(commerce.notifications_router)
api_router.include_router(midtrans_webhook.router)
