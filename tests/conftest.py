"""
Shared fixtures.

Builds the service graph on top of the in-memory store, a controllable
clock and a recording email provider so no test touches the network or a
database. pydantic-settings is prevented from reading the project's .env;
tests control config through constructor arguments or monkeypatch.setenv().
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from config import JWTSettings
from repositories.memory_store import InMemoryCredentialStore
from services.auth_service import AuthService
from services.notification_queue import NotificationQueue
from services.otp_service import OtpService
from services.token_service import TokenService

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


class FakeClock:
    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingEmailProvider:
    """Collects sent codes; fails the first ``fail_times`` sends."""

    def __init__(self, fail_times: int = 0, raise_error: bool = False) -> None:
        self.sent: list[tuple[str, str, Optional[str], int]] = []
        self.attempts = 0
        self._fail_times = fail_times
        self._raise = raise_error

    async def _record(self, purpose, email, user_name, otp_code) -> bool:
        self.attempts += 1
        if self.attempts <= self._fail_times:
            if self._raise:
                raise RuntimeError("smtp unavailable")
            return False
        self.sent.append((purpose, email, user_name, otp_code))
        return True

    async def send_verification_email(self, email, user_name, otp_code) -> bool:
        return await self._record("signup", email, user_name, otp_code)

    async def send_password_reset_email(self, email, user_name, otp_code) -> bool:
        return await self._record("reset_password", email, user_name, otp_code)

    def last_code(self, email: str) -> int:
        return [code for _, to, _, code in self.sent if to == email][-1]


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryCredentialStore()


@pytest.fixture
def email_provider():
    return RecordingEmailProvider()


@pytest.fixture
def notifications(email_provider):
    return NotificationQueue(email_provider, workers=1, retry_delay_seconds=0)


@pytest.fixture
def jwt_settings():
    return JWTSettings(secret_key=TEST_SECRET)


@pytest.fixture
def otp_service(store, notifications, clock):
    return OtpService(store, notifications, ttl_seconds=300, clock=clock)


@pytest.fixture
def token_service(jwt_settings, store, clock):
    return TokenService(jwt_settings, store, clock=clock)


@pytest.fixture
def auth_service(store, otp_service, token_service, clock):
    return AuthService(store, otp_service, token_service, clock=clock)


@pytest.fixture
def make_provider():
    """Factory for extra RecordingEmailProvider instances."""
    return RecordingEmailProvider
