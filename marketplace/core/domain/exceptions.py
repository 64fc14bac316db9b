"""
Business-rule failures raised by the domain and application layers.

Each carries a stable ``code``; ``marketplace.api.exception_handlers`` maps
the class to an HTTP status and renders the error envelope.
"""

from typing import Any


class DomainException(Exception):
    """Root of the hierarchy; ``details`` is structured context for logs and clients."""

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}


class ValidationException(DomainException):
    """Bad input; ``field`` names the offending attribute when known."""

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class AuthenticationRequiredException(DomainException):
    """Raised when a request carries no valid bearer credential."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, "AUTH_REQUIRED")


class AuthorizationException(DomainException):
    """Raised when a user is not allowed to act on a resource (ownership/role mismatch)."""

    def __init__(
        self,
        operation: str,
        resource: str | None = None,
        user_id: str | None = None,
        message: str | None = None,
    ):
        self.operation = operation
        self.resource = resource
        self.user_id = user_id
        msg = message or f"Not authorized to perform '{operation}'"
        if resource and not message:
            msg += f" on '{resource}'"
        super().__init__(
            msg,
            "FORBIDDEN",
            {
                "operation": operation,
                "resource": resource,
            },
        )


class EntityNotFoundException(DomainException):
    """Lookup by id found nothing the caller is allowed to see."""

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        message: str | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} with ID {entity_id} not found"
        super().__init__(
            msg,
            "NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class ProductGoneException(EntityNotFoundException):
    """Raised at checkout when a cart line points at a product that no longer exists."""

    def __init__(self, product_id: Any, product_name: str | None = None):
        self.product_name = product_name
        label = product_name or str(product_id)
        super().__init__(
            "Product",
            product_id,
            message=f"Product '{label}' is no longer available",
        )
        self.code = "PRODUCT_GONE"


class InsufficientStockException(DomainException):
    """A reservation asked for more units than the ledger holds."""

    def __init__(self, product_id: Any, requested: int, available: int, product_name: str | None = None):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        label = product_name or str(product_id)
        super().__init__(
            f"Insufficient stock for product '{label}'. Requested: {requested}, Available: {available}",
            "INSUFFICIENT_STOCK",
            {
                "product_id": str(product_id),
                "product_name": product_name,
                "requested": requested,
                "available": available,
            },
        )


class InvalidStateTransitionException(DomainException):
    """Raised when a requested status change is not allowed from the current state."""

    def __init__(self, current_state: str, target_state: str | None = None, message: str | None = None):
        self.current_state = current_state
        self.target_state = target_state
        if message is None:
            if target_state:
                message = f"Cannot change order status from '{current_state}' to '{target_state}'"
            else:
                message = f"Operation not allowed while order is '{current_state}'"
        super().__init__(
            message,
            "INVALID_STATE_TRANSITION",
            {"current_state": current_state, "target_state": target_state},
        )


class ConcurrencyException(DomainException):
    """The stored version moved on between load and save."""

    def __init__(self, entity_type: str, entity_id: Any, expected_version: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        super().__init__(
            f"{entity_type} {entity_id} was modified concurrently, please retry",
            "CONCURRENCY_CONFLICT",
            {
                "entity_type": entity_type,
                "entity_id": str(entity_id),
                "expected_version": expected_version,
            },
        )


class UpstreamGatewayException(DomainException):
    """
    Raised when the payment gateway cannot complete a request.

    ``kind`` selects the HTTP mapping:
    - ``bad_gateway``: the gateway answered with a structured error (502)
    - ``timeout``: the gateway did not answer in time (504)
    - ``unavailable``: the gateway could not be reached (503)
    """

    BAD_GATEWAY = "bad_gateway"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"

    def __init__(self, kind: str, message: str, original_error: Exception | None = None):
        self.kind = kind
        self.original_error = original_error
        super().__init__(message, "UPSTREAM_GATEWAY_ERROR", {"kind": kind})


__all__ = [
    "DomainException",
    "ValidationException",
    "AuthenticationRequiredException",
    "AuthorizationException",
    "EntityNotFoundException",
    "ProductGoneException",
    "InsufficientStockException",
    "InvalidStateTransitionException",
    "ConcurrencyException",
    "UpstreamGatewayException",
]
