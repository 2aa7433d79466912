"""Unit tests for AppSettings and sub-configs."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from config import (
    AppSettings,
    DatabaseSettings,
    EmailSettings,
    OtpSettings,
    RedisSettings,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def with_mongo(monkeypatch):
    """Set the required MONGODB_URI so AppSettings can be instantiated."""
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
    return monkeypatch


# ---------------------------------------------------------------------------
# DatabaseSettings
# ---------------------------------------------------------------------------


class TestDatabaseSettings:
    def test_loads_mongodb_uri(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        assert DatabaseSettings().mongodb_uri == "mongodb://localhost:27017/"

    def test_default_db_name(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        assert DatabaseSettings().db_name == "expo-registration"

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(PydanticValidationError):
            DatabaseSettings()


# ---------------------------------------------------------------------------
# RedisSettings / EmailSettings
# ---------------------------------------------------------------------------


class TestRedisSettings:
    def test_optional(self, monkeypatch):
        monkeypatch.delenv("REDIS_URI", raising=False)
        assert RedisSettings().redis_uri is None

    def test_loads_uri(self, monkeypatch):
        monkeypatch.setenv("REDIS_URI", "redis://localhost:6379/0")
        assert RedisSettings().redis_uri == "redis://localhost:6379/0"


class TestEmailSettings:
    def test_retry_defaults(self):
        s = EmailSettings()
        assert s.mail_timeout_seconds == 15.0
        assert s.mail_max_attempts == 3
        assert s.mail_backoff_seconds == 0.4

    def test_token_from_env(self, monkeypatch):
        monkeypatch.setenv("ZEPTO_API_TOKEN", "abc")
        assert EmailSettings().zepto_api_token == "abc"


# ---------------------------------------------------------------------------
# OtpSettings
# ---------------------------------------------------------------------------


class TestOtpSettings:
    def test_defaults(self):
        s = OtpSettings()
        assert s.otp_ttl_seconds == 300
        assert s.otp_resend_cooldown_seconds == 60
        assert s.otp_max_verify_attempts == 5
        assert s.otp_max_sends_per_window == 5
        assert s.otp_send_window_seconds == 3600
        assert s.otp_idempotency_window_seconds == 120
        assert s.otp_sweep_interval_seconds == 600

    def test_override_from_env(self, monkeypatch):
        monkeypatch.setenv("OTP_TTL_SECONDS", "120")
        assert OtpSettings().otp_ttl_seconds == 120


# ---------------------------------------------------------------------------
# AppSettings
# ---------------------------------------------------------------------------


class TestAppSettings:
    def test_sub_configs_populated(self, with_mongo):
        s = AppSettings()
        assert s.db.mongodb_uri == "mongodb://localhost:27017/"
        assert s.redis is not None
        assert s.email is not None
        assert s.otp.otp_ttl_seconds == 300
        assert s.logging.log_level == "INFO"
        assert s.sentry.sentry_dsn == ""

    def test_is_production(self, with_mongo):
        with_mongo.setenv("ENV", "production")
        assert AppSettings().is_production is True

    def test_development_by_default(self, with_mongo):
        with_mongo.delenv("ENV", raising=False)
        s = AppSettings()
        assert s.env == "development"
        assert s.is_production is False

    def test_cors_origins_from_json_env(self, with_mongo):
        with_mongo.setenv("CORS_ORIGINS", '["https://railtransexpo.com"]')
        assert AppSettings().cors_origins == ["https://railtransexpo.com"]
