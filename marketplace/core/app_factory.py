"""
Application factory for the marketplace API.

Builds the FastAPI app from a Settings object: middleware, error envelope,
versioned routers, the payment-proof file mount and the liveness probe.
Process-wide handles (database, gateway client) are created later, in the
lifespan.
"""

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from marketplace.api.exception_handlers import register_exception_handlers
from marketplace.api.middleware import RequestLoggingMiddleware
from marketplace.api.router import api_router
from marketplace.config.settings import Settings, get_settings
from marketplace.core.lifecycle import build_lifespan
from marketplace.domains.commerce.infrastructure.services.proof_storage_service import PUBLIC_PATH

logger = logging.getLogger(__name__)


class AppFactory:
    """
    Assembles the marketplace FastAPI application.

    One ``_configure_*`` step per concern; ``create_app`` runs them in order.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def create_app(self) -> FastAPI:
        """
        Build a configured application.

        The settings are kept on ``app.state.settings``; routes read them
        through the ``get_app_settings`` dependency.
        """
        app = FastAPI(
            title=self._settings.PROJECT_NAME,
            description=self._settings.PROJECT_DESCRIPTION,
            version=self._settings.VERSION,
            docs_url=f"{self._settings.API_V1_STR}/docs" if self._settings.DEBUG else None,
            redoc_url=f"{self._settings.API_V1_STR}/redoc" if self._settings.DEBUG else None,
            lifespan=build_lifespan(self._settings),
        )
        app.state.settings = self._settings

        self._configure_middleware(app)
        register_exception_handlers(app)
        self._configure_routes(app)
        self._configure_proof_files(app)
        self._configure_health_endpoint(app)

        logger.info(f"{self._settings.PROJECT_NAME} created ({self._settings.ENVIRONMENT})")
        return app

    def _configure_middleware(self, app: FastAPI) -> None:
        """
        Request logging runs inside CORS.

        Starlette wraps middleware in reverse registration order, so CORS
        is added last to end up outermost.
        """
        app.add_middleware(RequestLoggingMiddleware)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._settings.CORS_ORIGINS,
            # Browsers refuse credentials with a wildcard origin
            allow_credentials="*" not in self._settings.CORS_ORIGINS,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    def _configure_routes(self, app: FastAPI) -> None:
        app.include_router(api_router, prefix=self._settings.API_V1_STR)

    def _configure_proof_files(self, app: FastAPI) -> None:
        """Serve uploaded payment proofs at the URLs ProofStorageService hands out."""
        proof_dir = Path(self._settings.PROOF_STORAGE_PATH)
        proof_dir.mkdir(parents=True, exist_ok=True)
        app.mount(PUBLIC_PATH, StaticFiles(directory=str(proof_dir)), name="payment-proofs")
        logger.info(f"Payment proofs served from: {proof_dir}")

    def _configure_health_endpoint(self, app: FastAPI) -> None:
        settings = self._settings

        @app.get(f"{settings.API_V1_STR}/health", tags=["health"])
        @app.get("/health", tags=["health"], include_in_schema=False)
        async def health_check() -> dict[str, str]:
            """Liveness probe; no authentication and no dependency checks."""
            return {
                "status": "ok",
                "environment": settings.ENVIRONMENT,
                "version": settings.VERSION,
            }


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application with the given settings (environment defaults otherwise)."""
    return AppFactory(settings).create_app()
