"""
Commerce Infrastructure Services

Adapters for the payment gateway, notifications and proof storage.
"""

from .midtrans_gateway import MidtransPaymentGateway, compute_signature
from .notification_dispatcher import NotificationDispatcher
from .proof_storage_service import ProofStorageService

__all__ = [
    "MidtransPaymentGateway",
    "compute_signature",
    "NotificationDispatcher",
    "ProofStorageService",
]
