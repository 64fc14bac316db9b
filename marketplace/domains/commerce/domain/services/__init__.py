"""
Commerce Domain Services
"""

from marketplace.domains.commerce.domain.services.gateway_reference import (
    RETRY_MARKER,
    build_gateway_order_id,
    extract_order_id,
)
from marketplace.domains.commerce.domain.services.payment_reconciliation import (
    ORDER_UPDATED_SUFFIX,
    GatewayOutcome,
    map_gateway_status,
    status_message,
)

__all__ = [
    "GatewayOutcome",
    "map_gateway_status",
    "status_message",
    "ORDER_UPDATED_SUFFIX",
    "RETRY_MARKER",
    "build_gateway_order_id",
    "extract_order_id",
]
