"""
Shared FastAPI dependencies.

The application lifespan stores the settings and the container on
``app.state``; routes reach them through these providers so tests can
override them with ``app.dependency_overrides``.
"""

from fastapi import Request

from marketplace.config.settings import Settings
from marketplace.core.container import CommerceContainer


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_container(request: Request) -> CommerceContainer:
    """Commerce container built at startup."""
    return request.app.state.container


__all__ = ["get_app_settings", "get_container"]
