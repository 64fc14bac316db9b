"""
Exception handlers for FastAPI application.

Translates the domain exception hierarchy into HTTP responses using the
common error envelope.
"""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from marketplace.api.responses import error_response
from marketplace.core.domain import (
    AuthenticationRequiredException,
    AuthorizationException,
    ConcurrencyException,
    DomainException,
    EntityNotFoundException,
    InsufficientStockException,
    InvalidStateTransitionException,
    UpstreamGatewayException,
    ValidationException,
)

logger = logging.getLogger(__name__)

# Most specific first
DOMAIN_STATUS_CODES: tuple[tuple[type[DomainException], int], ...] = (
    (ValidationException, status.HTTP_400_BAD_REQUEST),
    (AuthenticationRequiredException, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationException, status.HTTP_403_FORBIDDEN),
    (EntityNotFoundException, status.HTTP_404_NOT_FOUND),
    (InvalidStateTransitionException, status.HTTP_400_BAD_REQUEST),
    (InsufficientStockException, status.HTTP_400_BAD_REQUEST),
    (ConcurrencyException, status.HTTP_409_CONFLICT),
)

GATEWAY_STATUS_CODES = {
    UpstreamGatewayException.BAD_GATEWAY: status.HTTP_502_BAD_GATEWAY,
    UpstreamGatewayException.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
    UpstreamGatewayException.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_code_for(exc: DomainException) -> int:
    """HTTP status for a domain exception (500 when unmapped)."""
    if isinstance(exc, UpstreamGatewayException):
        return GATEWAY_STATUS_CODES.get(exc.kind, status.HTTP_502_BAD_GATEWAY)
    for exc_type, status_code in DOMAIN_STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle DomainException subclasses raised by use cases."""
    if not isinstance(exc, DomainException):
        return await global_exception_handler(request, exc)

    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    details = exc.details if isinstance(exc, InsufficientStockException) else None
    return error_response(status_code, exc.message, exc.code, details=details, headers=headers)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle HTTPException with consistent response format."""
    http_exc = exc if isinstance(exc, HTTPException) else HTTPException(status_code=500, detail=str(exc))
    return error_response(
        http_exc.status_code,
        str(http_exc.detail),
        f"HTTP_{http_exc.status_code}",
        headers=http_exc.headers,
    )


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle request validation errors (400 with field details)."""
    if not isinstance(exc, RequestValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc), "VALIDATION_ERROR")

    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    logger.warning(f"Validation error on {request.url.path}: {errors}")

    message = f"{errors[0]['field']}: {errors[0]['message']}" if errors else "Validation error"
    return error_response(status.HTTP_400_BAD_REQUEST, message, "VALIDATION_ERROR", details=errors)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle all unhandled exceptions.

    Logs the full exception with traceback and returns a safe error response.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc!s}",
        exc_info=True,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "INTERNAL_ERROR",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("Exception handlers registered")
