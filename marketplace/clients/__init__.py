"""
External API clients
"""

from .midtrans_client import (
    MidtransAPIError,
    MidtransClient,
    MidtransConnectionError,
    MidtransError,
    MidtransTimeoutError,
)

__all__ = [
    "MidtransClient",
    "MidtransError",
    "MidtransAPIError",
    "MidtransTimeoutError",
    "MidtransConnectionError",
]
