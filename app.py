"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.templates import EmailTemplates
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from infrastructure.otp.memory import InMemoryOtpStore
from infrastructure.otp.redis_store import RedisOtpStore
from infrastructure.redis_client import create_redis_client
from repositories.dynamic_field_repository import DynamicFieldRepository
from repositories.mail_log_repository import MailLogRepository
from repositories.registration_config_repository import RegistrationConfigRepository
from repositories.registration_repository import RegistrationRepository
from routes.health_routes import router as health_router
from routes.otp_routes import router as otp_router
from routes.registration_config_routes import router as registration_config_router
from services.field_sync_service import FieldSyncService
from services.otp_service import OtpService
from services.registration_config_service import RegistrationConfigService
from shared.logging import get_logger, setup_logging
from workers.otp_sweeper import run_otp_sweeper

log = get_logger(__name__)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        env=settings.env,
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            environment=settings.env,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(settings.db.mongodb_uri)
        db = mongo_client[settings.db.db_name]
        app.state.mongo_client = mongo_client
        app.state.db = db
        app.state.settings = settings

        # Redis is optional; without it OTP state stays in this process
        redis_client = None
        if settings.redis.redis_uri:
            redis_client = await create_redis_client(settings.redis.redis_uri)
        app.state.redis = redis_client

        if redis_client is not None:
            otp_store = RedisOtpStore(
                redis_client, window_seconds=settings.otp.otp_send_window_seconds
            )
        else:
            otp_store = InMemoryOtpStore()
        app.state.otp_store = otp_store

        http_client = HttpClient(
            timeout=settings.email.mail_timeout_seconds,
            max_attempts=settings.email.mail_max_attempts,
            backoff_seconds=settings.email.mail_backoff_seconds,
        )
        app.state.http_client = http_client

        email_provider = ZeptoMailProvider(
            settings.email, http_client, mail_logs=MailLogRepository(db)
        )
        app.state.otp_service = OtpService(
            store=otp_store,
            registrations=RegistrationRepository(db),
            email_provider=email_provider,
            templates=EmailTemplates(event_name=settings.email.mail_from_name),
            settings=settings.otp,
        )

        dynamic_fields = DynamicFieldRepository(db)
        await dynamic_fields.ensure_indexes()
        field_sync = FieldSyncService(dynamic_fields)
        app.state.registration_config_service = RegistrationConfigService(
            RegistrationConfigRepository(db), field_sync
        )

        sweeper = asyncio.create_task(
            run_otp_sweeper(app.state.otp_service, settings.otp.otp_sweep_interval_seconds)
        )
        log.info(
            "app_started",
            env=settings.env,
            db=settings.db.db_name,
            otp_store=type(otp_store).__name__,
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
        await http_client.aclose()
        await mongo_client.close()
        if redis_client is not None:
            await redis_client.aclose()
        log.info("app_stopped")

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(otp_router)
    app.include_router(registration_config_router)

    return app
