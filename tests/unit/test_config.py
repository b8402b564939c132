"""Unit tests for AppSettings and sub-configs."""

import pytest

from config import (
    AppSettings,
    DatabaseSettings,
    JWTSettings,
    NotificationSettings,
    OtpSettings,
)


class TestDatabaseSettings:
    def test_mongodb_uri_optional(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        assert DatabaseSettings().mongodb_uri is None

    def test_loads_mongodb_uri(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        assert DatabaseSettings().mongodb_uri == "mongodb://localhost:27017/"

    def test_default_db_name(self, monkeypatch):
        monkeypatch.delenv("DB_NAME", raising=False)
        assert DatabaseSettings().db_name == "auth-backend"


class TestJWTSettings:
    def test_defaults(self, monkeypatch):
        for var in (
            "SECRET_KEY",
            "JWT_ALGORITHM",
            "ACCESS_TOKEN_TTL_SECONDS",
            "REFRESH_TOKEN_TTL_SECONDS",
        ):
            monkeypatch.delenv(var, raising=False)
        s = JWTSettings()
        assert s.secret_key == ""
        assert s.jwt_algorithm == "HS256"
        assert s.access_token_ttl_seconds == 7 * 24 * 3600
        assert s.refresh_token_ttl_seconds == 3600

    def test_secret_key_from_env(self, monkeypatch):
        monkeypatch.setenv("SECRET_KEY", "from-env")
        assert JWTSettings().secret_key == "from-env"


class TestOtpSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("OTP_TTL_SECONDS", raising=False)
        monkeypatch.delenv("OTP_CONSUME_ON_SUCCESS", raising=False)
        s = OtpSettings()
        assert s.otp_ttl_seconds == 300
        assert s.otp_consume_on_success is True

    def test_consume_can_be_disabled(self, monkeypatch):
        monkeypatch.setenv("OTP_CONSUME_ON_SUCCESS", "false")
        assert OtpSettings().otp_consume_on_success is False


def test_notification_defaults(monkeypatch):
    for var in ("NOTIFY_WORKERS", "NOTIFY_QUEUE_SIZE", "NOTIFY_MAX_ATTEMPTS"):
        monkeypatch.delenv(var, raising=False)
    s = NotificationSettings()
    assert s.notify_workers == 2
    assert s.notify_queue_size == 1000
    assert s.notify_max_attempts == 3


@pytest.mark.parametrize(
    "env, expected",
    [("production", True), ("development", False)],
    ids=["production", "development"],
)
def test_is_production(monkeypatch, env, expected):
    monkeypatch.setenv("ENV", env)
    assert AppSettings().is_production is expected


class TestAppSettings:
    def test_sub_configs_populated(self):
        s = AppSettings()
        for attr in (
            "db",
            "jwt",
            "otp",
            "notifications",
            "email",
            "logging",
            "sentry",
        ):
            assert getattr(s, attr) is not None, f"sub-config '{attr}' is None"

    def test_cors_origins_default(self):
        assert AppSettings().cors_origins == ["*"]

    def test_explicit_sub_config_kept(self):
        jwt = JWTSettings(secret_key="explicit")
        assert AppSettings(jwt=jwt).jwt.secret_key == "explicit"
