import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import sentry_sdk
import structlog
from fastapi import FastAPI
from sentry_sdk.integrations.starlette import StarletteIntegration
from starlette.middleware.cors import CORSMiddleware

from identity_service.api import errors
from identity_service.api.routers import healthz, readyz, users
from identity_service.core.config import Settings, get_settings
from identity_service.core.startup import init_schema, mark_schema_ready
from identity_service.db import create_engine_from_settings, create_session_factory
from identity_service.infra.unit_of_work import sqlalchemy_uow_factory
from identity_service.logging import setup_logging
from identity_service.middleware.request_id import request_id_middleware
from identity_service.services.users import UserService
from identity_service.services.validation import UserValidator


def _init_sentry(settings: Settings) -> None:
    if not settings.sentry_dsn:
        return
    # traces_sample_rate: clamp to [0.0, 0.2]
    try:
        rate_raw = float(os.getenv("SENTRY_TRACES_RATE", "0"))
    except ValueError:
        rate_raw = 0.0
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.app_env,
        release=os.getenv("RELEASE"),
        integrations=[StarletteIntegration()],
        traces_sample_rate=max(0.0, min(0.2, rate_raw)),
        send_default_pii=False,
    )


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    if settings.schema_bootstrap:
        await init_schema(app.state.engine, timeout=settings.timeout_schema_init_seconds)
    else:
        mark_schema_ready()
    try:
        yield
    finally:
        await app.state.engine.dispose()
        structlog.get_logger(__name__).info("app_shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    # Initialize structured logging first
    setup_logging(app_env=settings.app_env)
    _init_sentry(settings)

    app = FastAPI(title="Identity Service", version="0.1.0", lifespan=_lifespan)

    # One engine, one validator and one service per process, shared by all requests.
    engine = create_engine_from_settings(settings)
    session_factory = create_session_factory(engine)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.user_service = UserService(
        sqlalchemy_uow_factory(session_factory),
        UserValidator.from_settings(settings),
    )

    # Request-ID middleware (JSON access log)
    app.middleware("http")(request_id_middleware)

    if settings.cors_origins:
        allow_origins = settings.cors_origins
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allow_origins,
            # Credentials cannot be combined with a wildcard origin.
            allow_credentials=settings.cors_allow_credentials and "*" not in allow_origins,
            allow_methods=settings.cors_methods,
            allow_headers=settings.cors_headers,
            expose_headers=settings.cors_expose_headers,
            max_age=settings.cors_max_age,
        )

    errors.install(app)
    app.include_router(users.router)
    app.include_router(healthz.router)
    app.include_router(readyz.router)

    structlog.get_logger(__name__).info("app_startup", env=settings.app_env)
    return app


app = create_app()
