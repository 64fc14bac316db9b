"""
Gateway-assigned order identifiers.

Each payment attempt gets its own id so the gateway never sees a
duplicate: ``{orderId}-{timestamp}`` for a first attempt,
``{orderId}-RETRY-{timestamp}`` for retries. Timestamps are epoch
milliseconds.
"""

from datetime import datetime

from marketplace.core.domain import utcnow

RETRY_MARKER = "-RETRY-"


def build_gateway_order_id(order_id: str, retry: bool = False, now: datetime | None = None) -> str:
    timestamp = int((now or utcnow()).timestamp() * 1000)
    if retry:
        return f"{order_id}{RETRY_MARKER}{timestamp}"
    return f"{order_id}-{timestamp}"


def extract_order_id(gateway_order_id: str) -> str:
    """Recover the internal order id from a gateway-assigned id."""
    if RETRY_MARKER in gateway_order_id:
        return gateway_order_id.rsplit(RETRY_MARKER, 1)[0]
    head, sep, tail = gateway_order_id.rpartition("-")
    # Epoch-ms suffixes are 13 digits; a bare UUID ends in a 12-char group
    if sep and tail.isdigit() and len(tail) >= 13:
        return head
    return gateway_order_id


__all__ = ["RETRY_MARKER", "build_gateway_order_id", "extract_order_id"]
