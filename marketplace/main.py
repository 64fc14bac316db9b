"""
Application entry point.

Configures logging and error reporting, then builds the application.
"""

import logging

import sentry_sdk

from marketplace.config.settings import get_settings
from marketplace.core.app_factory import create_app
from marketplace.core.shared.logger import configure_logging

settings = get_settings()
configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT, settings.LOG_FILE)

logger = logging.getLogger(__name__)

# Initialize Sentry for error tracking
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        send_default_pii=False,
        environment=settings.ENVIRONMENT,
        release=settings.VERSION,
    )

# Create application using factory
app = create_app(settings)

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")
    uvicorn.run(
        "marketplace.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
