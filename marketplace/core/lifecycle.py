"""
Application lifecycle management using the FastAPI lifespan pattern.

Builds the process-wide handles (database, gateway client, push client,
commerce container) on startup, stores them on ``app.state`` and closes
them on shutdown.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from marketplace.clients import MidtransClient
from marketplace.config.settings import Settings
from marketplace.core.container import CommerceContainer
from marketplace.database import Database

logger = logging.getLogger(__name__)


class LifecycleManager:
    """
    Manages application lifecycle events.

    Handles startup initialization and graceful shutdown.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._database: Database | None = None
        self._midtrans_client: MidtransClient | None = None
        self._push_client: httpx.AsyncClient | None = None

    async def startup(self, app: FastAPI) -> None:
        logger.info("Starting application lifecycle...")
        self._verify_configurations()

        self._database = Database.from_settings(self._settings)
        self._midtrans_client = MidtransClient(self._settings)
        if self._settings.NOTIFICATION_PUSH_URL:
            self._push_client = httpx.AsyncClient(timeout=self._settings.NOTIFICATION_PUSH_TIMEOUT_SECONDS)

        app.state.database = self._database
        app.state.container = CommerceContainer.build(
            self._settings,
            self._database,
            self._midtrans_client,
            push_client=self._push_client,
        )
        logger.info("Application lifecycle startup completed")

    async def shutdown(self) -> None:
        logger.info("Stopping application lifecycle...")
        if self._push_client is not None:
            await self._push_client.aclose()
        if self._midtrans_client is not None:
            await self._midtrans_client.aclose()
        if self._database is not None:
            await self._database.dispose()
        logger.info("Application lifecycle shutdown completed")

    def _verify_configurations(self) -> None:
        """Log missing critical configuration; the service still starts."""
        if not self._settings.MIDTRANS_SERVER_KEY:
            logger.warning("MIDTRANS_SERVER_KEY is not set: payment calls and webhook verification will fail")
        if self._settings.JWT_SECRET_KEY == "change-me" and not self._settings.is_development:
            logger.warning("JWT_SECRET_KEY uses the default value outside development")


def build_lifespan(settings: Settings):
    """Lifespan context bound to the given settings."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        manager = LifecycleManager(settings)
        await manager.startup(app)
        try:
            yield
        finally:
            await manager.shutdown()

    return lifespan
