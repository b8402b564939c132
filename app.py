"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.console import ConsoleEmailProvider
from infrastructure.email.protocol import EmailProvider
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from repositories.memory_store import InMemoryCredentialStore
from repositories.mongo_store import MongoCredentialStore
from repositories.protocol import CredentialStore
from routes.auth_routes import router as auth_router
from routes.health_routes import router as health_router
from routes.home_routes import router as home_router
from services.auth_service import AuthService
from services.notification_queue import NotificationQueue
from services.otp_service import OtpService
from services.token_service import TokenService
from shared.logging import get_logger, setup_logging


def create_app(
    settings: Optional[AppSettings] = None,
    store: Optional[CredentialStore] = None,
    email_provider: Optional[EmailProvider] = None,
) -> FastAPI:
    """Create and return a fully configured FastAPI application.

    *store* and *email_provider* replace the configured backends when given.
    """
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging, env=settings.env)
    log = get_logger(__name__)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            environment=settings.env,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    if not settings.jwt.secret_key:
        log.warning("secret_key_missing", detail="login will fail until SECRET_KEY is set")

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        app.state.settings = settings

        mongo_client: Optional[AsyncMongoClient] = None
        credential_store = store
        if credential_store is None:
            if settings.db.mongodb_uri:
                mongo_client = AsyncMongoClient(settings.db.mongodb_uri, tz_aware=True)
                credential_store = MongoCredentialStore(mongo_client[settings.db.db_name])
            else:
                log.warning("using_in_memory_store", reason="mongodb_uri_not_set")
                credential_store = InMemoryCredentialStore()
        app.state.store = credential_store

        http_client: Optional[HttpClient] = None
        provider = email_provider
        if provider is None:
            if settings.email.zepto_api_token:
                http_client = HttpClient(timeout=settings.email.email_timeout_seconds)
                provider = ZeptoMailProvider(
                    settings.email,
                    http_client,
                    app_name=settings.app_name,
                    otp_ttl_seconds=settings.otp.otp_ttl_seconds,
                )
            else:
                provider = ConsoleEmailProvider()

        notifications = NotificationQueue(
            provider,
            workers=settings.notifications.notify_workers,
            max_size=settings.notifications.notify_queue_size,
            max_attempts=settings.notifications.notify_max_attempts,
            retry_delay_seconds=settings.notifications.notify_retry_delay_seconds,
        )
        await notifications.start()
        app.state.notifications = notifications

        otp_service = OtpService(
            credential_store, notifications, ttl_seconds=settings.otp.otp_ttl_seconds
        )
        token_service = TokenService(settings.jwt, credential_store)
        app.state.auth_service = AuthService(
            credential_store,
            otp_service,
            token_service,
            consume_otp_on_success=settings.otp.otp_consume_on_success,
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await notifications.stop()
        if http_client is not None:
            await http_client.aclose()
        if mongo_client is not None:
            await mongo_client.close()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=None if settings.is_production else settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    # all origins allowed with credentials support.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["*"],
        expose_headers=["Content-Length"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(home_router)
    app.include_router(auth_router)

    return app
