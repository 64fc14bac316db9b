"""
Unit tests for configuration and log rendering.
"""

import json
import logging
from datetime import timedelta

import pytest
from pydantic import ValidationError

from marketplace.config.settings import Settings
from marketplace.core.shared.logger import ColoredFormatter, JSONFormatter, RequestIdFilter, request_id_var


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def make_record(message: str = "Order created", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("marketplace.test", level, __file__, 10, message, None, None)


@pytest.mark.unit
class TestSettings:
    def test_database_url_from_parts(self):
        settings = make_settings(
            DATABASE_URL=None, DB_HOST="db", DB_USER="shop", DB_PASSWORD="p@ss word", DB_NAME="orders"
        )

        assert settings.database_url == "postgresql+asyncpg://shop:p%40ss+word@db:5432/orders"
        assert settings.sync_database_url == "postgresql://shop:p%40ss+word@db:5432/orders"

    def test_database_url_override(self):
        settings = make_settings(DATABASE_URL="sqlite+aiosqlite:///local.db")

        assert settings.database_url == "sqlite+aiosqlite:///local.db"
        assert settings.sync_database_url == "sqlite:///local.db"

    def test_comma_separated_lists(self):
        settings = make_settings(
            CORS_ORIGINS="https://a.example, https://b.example", ALLOWED_PROOF_EXTENSIONS="jpg,png"
        )

        assert settings.CORS_ORIGINS == ["https://a.example", "https://b.example"]
        assert settings.ALLOWED_PROOF_EXTENSIONS == ["jpg", "png"]

    def test_gateway_endpoints_follow_production_flag(self):
        sandbox = make_settings()
        production = make_settings(MIDTRANS_IS_PRODUCTION=True)

        assert sandbox.midtrans_snap_base_url == "https://app.sandbox.midtrans.com/snap/v1"
        assert production.midtrans_snap_base_url == "https://app.midtrans.com/snap/v1"
        assert production.midtrans_api_base_url == "https://api.midtrans.com/v2"

    def test_token_ttl(self):
        assert make_settings().snap_token_ttl == timedelta(hours=24)
        assert make_settings(SNAP_TOKEN_TTL_MINUTES=15).snap_token_ttl == timedelta(minutes=15)

    @pytest.mark.parametrize("field, value", [("LOG_FORMAT", "xml"), ("DB_POOL_SIZE", 0), ("DB_MAX_OVERFLOW", -1)])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            make_settings(**{field: value})


@pytest.mark.unit
class TestLogRendering:
    def test_json_formatter_carries_request_id(self):
        # Arrange
        record = make_record()
        token = request_id_var.set("req-123")
        try:
            RequestIdFilter().filter(record)
        finally:
            request_id_var.reset(token)

        # Act
        payload = json.loads(JSONFormatter().format(record))

        # Assert
        assert payload["message"] == "Order created"
        assert payload["level"] == "INFO"
        assert payload["request_id"] == "req-123"

    def test_filter_defaults_to_dash_outside_requests(self):
        record = make_record()

        RequestIdFilter().filter(record)

        assert record.request_id == "-"

    def test_colored_formatter_leaves_record_untouched(self):
        record = make_record(level=logging.WARNING)
        RequestIdFilter().filter(record)

        rendered = ColoredFormatter("%(levelname)s %(message)s").format(record)

        assert "\033[33mWARNING\033[0m" in rendered
        assert record.levelname == "WARNING"
