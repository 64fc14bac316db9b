"""
Middleware package for FastAPI application.
"""

from marketplace.api.middleware.logging_middleware import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
