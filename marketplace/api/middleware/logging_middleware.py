"""
Access logging with request ids.

Every request gets an id, taken from ``X-Request-ID`` when the caller sends
one. The id is bound to ``request_id_var`` for the duration of the request so
log records emitted by routes and use cases carry it, and it is echoed back
on the response.
"""

import logging
import time
import uuid
from collections.abc import Callable
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from marketplace.core.shared.logger import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Probes and proof images are tagged with an id but not logged
QUIET_PREFIXES: tuple[str, ...] = ("/health", "/static", "/favicon.ico")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line on the way in and one on the way out, with timing."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            if request.url.path.startswith(QUIET_PREFIXES):
                response = await call_next(request)
            else:
                response = await self._timed(request, call_next)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)

    async def _timed(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        route = f"{request.method} {request.url.path}"
        logger.info(f"--> {route} from {client_address(request)}")
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"<-- {route} failed after {elapsed_ms(started):.2f}ms: {e}")
            raise

        took = elapsed_ms(started)
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(level, f"<-- {route} {response.status_code} in {took:.2f}ms")
        response.headers["X-Response-Time-Ms"] = f"{took:.2f}"
        return response


def elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


def client_address(request: Request) -> str:
    """First hop of ``X-Forwarded-For`` when behind a proxy, else the peer address."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
