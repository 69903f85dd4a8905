# tests/conftest.py
import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# identity_service.main builds an app at import time; point it at SQLite first.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SENTRY_DSN", "")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./identity_test.db")

from identity_service.core.config import Settings  # noqa: E402
from identity_service.core.startup import init_schema, reset_schema_state  # noqa: E402
from identity_service.main import create_app  # noqa: E402


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        app_env="test",
        sentry_dsn=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'identity.db'}",
        schema_bootstrap=False,
        timeout_handler_seconds=5.0,
    )


@pytest_asyncio.fixture
async def app(settings):
    # ASGITransport does not run the lifespan, so the schema is created here.
    application = create_app(settings)
    await init_schema(application.state.engine)
    try:
        yield application
    finally:
        await application.state.engine.dispose()
        reset_schema_state()


@pytest_asyncio.fixture
async def app_client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def session(app):
    async with app.state.session_factory() as s:
        yield s
        if s.in_transaction():
            await s.rollback()
